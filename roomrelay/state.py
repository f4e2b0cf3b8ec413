"""Shared runtime state.

The registry, router and room manager are created once per application in the
lifespan handler and stored on ``app.state``. Endpoints reach them through the
dependency helpers below instead of importing module-level singletons.
"""
from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import HTTPConnection

from .registry import ClientRegistry
from .relay import MessageRouter
from .room import RoomManager


@dataclass
class RelayState:
    registry: ClientRegistry
    router: MessageRouter
    rooms: RoomManager

    @classmethod
    def create(cls) -> "RelayState":
        registry = ClientRegistry()
        return cls(registry=registry, router=MessageRouter(registry), rooms=RoomManager())

    async def shutdown(self) -> None:
        """Close every tracked connection and forget it."""
        for client in await self.registry.clear() + await self.rooms.clear():
            await client.close(code=1001, reason="server shutting down")


def get_state(conn: HTTPConnection) -> RelayState:
    return conn.app.state.relay


def get_registry(conn: HTTPConnection) -> ClientRegistry:
    return get_state(conn).registry


def get_router(conn: HTTPConnection) -> MessageRouter:
    return get_state(conn).router


def get_rooms(conn: HTTPConnection) -> RoomManager:
    return get_state(conn).rooms


__all__ = ["RelayState", "get_state", "get_registry", "get_router", "get_rooms"]
