"""Exception types raised by the relay core.

Every failure is scoped to a single connection or a single operation; none of
these should ever escape a connection handler.
"""
from __future__ import annotations

from .constants import CLOSE_BAD_PARAMETERS, CLOSE_ROOM_NOT_FOUND


class RelayError(Exception):
    """Base class for all relay errors."""


class ConnectionRejected(RelayError):
    """The connection parameters were unusable; the socket is closed with *code*."""

    code: int = CLOSE_BAD_PARAMETERS


class MissingParameter(ConnectionRejected):
    def __init__(self, name: str):
        super().__init__(f"missing parameter: {name}")
        self.name = name


class UnknownCommand(ConnectionRejected):
    def __init__(self, command: str):
        super().__init__(f"unknown command: {command}")
        self.command = command


class RoomNotFound(ConnectionRejected):
    code = CLOSE_ROOM_NOT_FOUND

    def __init__(self, room_id: str):
        super().__init__(f"room not found: {room_id}")
        self.room_id = room_id


class MalformedMessage(RelayError):
    """Inbound payload could not be parsed; the frame is dropped."""


class SendFailure(RelayError):
    """Sending to *identity* failed; treated as an implicit disconnect."""

    def __init__(self, identity: str, cause: BaseException | None = None):
        super().__init__(f"send to {identity!r} failed: {cause!r}")
        self.identity = identity
        self.cause = cause


__all__ = [
    "RelayError",
    "ConnectionRejected",
    "MissingParameter",
    "UnknownCommand",
    "RoomNotFound",
    "MalformedMessage",
    "SendFailure",
]
