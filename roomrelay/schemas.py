"""Pydantic data schemas used across the relay service.

Wire formats for both relay variants live here together with the response
models of the small HTTP status API.
"""
from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedMessage

# -----------------------------
# Direct relay
# -----------------------------

class Envelope(BaseModel):
    """Addressed message sent by a client: ``{"from", "to", "body"}``."""

    # Unknown keys are kept so the frame is forwarded as the sender wrote it.
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sender: str = Field(alias="from")
    to: List[str]
    body: str

    def recipients(self) -> List[str]:
        """Return ``to`` with repeated identities removed (first occurrence wins)."""
        return list(dict.fromkeys(self.to))

    def dumps(self) -> str:
        return self.model_dump_json(by_alias=True)


def parse_envelope(raw: str | bytes) -> Envelope:
    """Parse an inbound frame into an :class:`Envelope`.

    Raises
    ------
    MalformedMessage
        If *raw* is not JSON or does not have the envelope shape.
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return Envelope.model_validate_json(raw)
    except UnicodeDecodeError as exc:
        raise MalformedMessage("binary frame is not UTF-8 text") from exc
    except ValidationError as exc:
        raise MalformedMessage(f"invalid envelope: {exc.error_count()} error(s)") from exc


# -----------------------------
# Room relay
# -----------------------------

class RoomAction(str, Enum):
    JOIN = "join"
    EVENT = "event"
    EXIT = "exit"


class RoomMessage(BaseModel):
    """Server-synthesized room notification or relayed client payload."""

    action: RoomAction
    client_id: str
    body: str

    def dumps(self) -> str:
        return self.model_dump_json()


# -----------------------------
# HTTP status API
# -----------------------------

class HealthResponse(BaseModel):
    status: str = "ok"


class ClientList(BaseModel):
    count: int
    identities: List[str]


class RoomSummary(BaseModel):
    room_id: str
    member_count: int
    members: List[str]


__all__ = [
    "Envelope",
    "parse_envelope",
    "RoomAction",
    "RoomMessage",
    "HealthResponse",
    "ClientList",
    "RoomSummary",
]
