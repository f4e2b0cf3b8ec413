from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket

from ..errors import ConnectionRejected
from ..lifecycle import RelayConnection, RoomConnection, reject, require
from ..registry import ClientRegistry
from ..relay import MessageRouter
from ..room import RoomManager
from ..state import get_registry, get_rooms, get_router

router = APIRouter(prefix="/ws", tags=["ws"])


@router.websocket("/relay")
async def relay_endpoint(
    ws: WebSocket,
    identity: Optional[str] = Query(default=None, alias="id"),
    registry: ClientRegistry = Depends(get_registry),
    message_router: MessageRouter = Depends(get_router),
):
    try:
        require({"id": identity}, "id")
    except ConnectionRejected as exc:
        await reject(ws, exc)
        return
    await RelayConnection(ws, identity, registry, message_router).run()


@router.websocket("/rooms")
async def room_endpoint(
    ws: WebSocket,
    command: Optional[str] = Query(default=None),
    room_id: Optional[str] = Query(default=None),
    client_id: Optional[str] = Query(default=None),
    rooms: RoomManager = Depends(get_rooms),
):
    try:
        require({"command": command, "room_id": room_id, "client_id": client_id}, "command", "room_id", "client_id")
        connection = RoomConnection(ws, command, room_id, client_id, rooms)
    except ConnectionRejected as exc:
        await reject(ws, exc)
        return
    await connection.run()
