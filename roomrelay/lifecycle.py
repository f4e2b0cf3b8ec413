"""Per-connection task loops.

Each accepted WebSocket is driven by one coroutine that registers the client,
processes inbound frames in order, and always cleans up when the socket goes
away, whether the peer closed it or something failed.
"""
from __future__ import annotations

import logging
from typing import AsyncIterator, Mapping, Optional, Union

from fastapi import WebSocket

from .client import Client
from .constants import (
    COMMAND_CREATE,
    CLOSE_REPLACED,
    JOINED_BODY,
    LEFT_BODY,
    REPLACED_REASON,
    ROOM_COMMANDS,
)
from .errors import ConnectionRejected, MalformedMessage, MissingParameter, RoomNotFound, UnknownCommand
from .registry import ClientRegistry
from .relay import MessageRouter
from .room import RoomManager
from .schemas import RoomAction, RoomMessage, parse_envelope

logger = logging.getLogger(__name__)

Frame = Union[str, bytes]


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def require(params: Mapping[str, Optional[str]], *names: str) -> None:
    """Raise :class:`MissingParameter` for the first absent or empty parameter."""
    for name in names:
        if not params.get(name):
            raise MissingParameter(name)


async def reject(ws: WebSocket, exc: ConnectionRejected) -> None:
    """Accept then immediately close *ws*, carrying the reason in the close frame."""
    logger.info("Rejecting connection: %s", exc)
    await ws.accept()
    await ws.close(code=exc.code, reason=str(exc))


async def iter_frames(ws: WebSocket) -> AsyncIterator[Frame]:
    """Yield inbound text/bytes frames until the peer disconnects."""
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            return
        if message.get("text") is not None:
            yield message["text"]
        elif message.get("bytes") is not None:
            yield message["bytes"]


def as_text(frame: Frame) -> str:
    if isinstance(frame, str):
        return frame
    try:
        return frame.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedMessage("binary frame is not UTF-8 text") from exc


# ---------------------------------------------------------------------
# Direct relay
# ---------------------------------------------------------------------

class RelayConnection:
    """One direct-relay connection: inbound envelopes go to :class:`MessageRouter`."""

    def __init__(self, ws: WebSocket, identity: str, registry: ClientRegistry, router: MessageRouter):
        self.ws = ws
        self.client = Client(identity, ws)
        self.registry = registry
        self.router = router

    async def run(self) -> None:
        await self.ws.accept()
        await self.on_open()
        try:
            async for frame in iter_frames(self.ws):
                await self.on_message(frame)
        except Exception:
            logger.exception("Relay connection %r failed", self.client.identity)
        finally:
            await self.on_close()

    async def on_open(self) -> None:
        prior = await self.registry.register(self.client)
        if prior is not None:
            await prior.close(code=CLOSE_REPLACED, reason=REPLACED_REASON)
        logger.info("Client %r connected (%d online)", self.client.identity, len(self.registry))

    async def on_message(self, frame: Frame) -> None:
        try:
            envelope = parse_envelope(frame)
        except MalformedMessage as exc:
            logger.warning("Dropping frame from %r: %s", self.client.identity, exc)
            return
        await self.router.deliver(envelope)

    async def on_close(self) -> None:
        await self.registry.unregister(self.client.identity, self.client)
        logger.info("Client %r disconnected (%d online)", self.client.identity, len(self.registry))


# ---------------------------------------------------------------------
# Room relay
# ---------------------------------------------------------------------

class RoomConnection:
    """One room-relay connection bound to *room_id* for its whole lifetime."""

    def __init__(self, ws: WebSocket, command: str, room_id: str, client_id: str, rooms: RoomManager):
        if command not in ROOM_COMMANDS:
            raise UnknownCommand(command)
        self.ws = ws
        self.command = command
        self.room_id = room_id
        self.client = Client(client_id, ws)
        self.rooms = rooms
        self.member = False

    async def run(self) -> None:
        await self.ws.accept()
        try:
            await self.enter()
        except RoomNotFound as exc:
            logger.info("Rejecting %r: %s", self.client.identity, exc)
            await self.ws.close(code=exc.code, reason=str(exc))
            return

        try:
            await self.on_open()
            async for frame in iter_frames(self.ws):
                await self.on_message(frame)
        except Exception:
            logger.exception("Room connection %r in %r failed", self.client.identity, self.room_id)
        finally:
            await self.on_close()

    async def enter(self) -> None:
        if self.command == COMMAND_CREATE:
            self.member = await self.rooms.create(self.room_id, self.client)
        else:
            self.member = await self.rooms.join(self.room_id, self.client)

    def _message(self, action: RoomAction, body: str) -> RoomMessage:
        return RoomMessage(action=action, client_id=self.client.identity, body=body)

    async def on_open(self) -> None:
        # A no-op create/join made nobody a member, so there is nothing to announce.
        if self.member:
            await self.rooms.broadcast(self.room_id, self._message(RoomAction.JOIN, JOINED_BODY))

    async def on_message(self, frame: Frame) -> None:
        try:
            body = as_text(frame)
        except MalformedMessage as exc:
            logger.warning("Dropping frame from %r: %s", self.client.identity, exc)
            return
        await self.rooms.broadcast(self.room_id, self._message(RoomAction.EVENT, body))

    async def on_close(self) -> None:
        try:
            removed = await self.rooms.exit(self.room_id, self.client.identity, self.client)
        except RoomNotFound:
            # Lost a race with another removal; nothing left to leave.
            return
        if removed:
            await self.rooms.broadcast(
                self.room_id, self._message(RoomAction.EXIT, LEFT_BODY), exclude=self.client
            )


__all__ = [
    "require",
    "reject",
    "iter_frames",
    "as_text",
    "RelayConnection",
    "RoomConnection",
]
