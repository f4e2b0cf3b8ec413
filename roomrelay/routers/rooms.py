from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..room import RoomManager
from ..schemas import RoomSummary
from ..state import get_rooms

router = APIRouter(prefix="", tags=["rooms"])


@router.get("/rooms", response_model=List[RoomSummary])
async def list_rooms(rooms: RoomManager = Depends(get_rooms)):
    return await rooms.summaries()


@router.get("/rooms/{room_id}", response_model=RoomSummary)
async def get_room(room_id: str, rooms: RoomManager = Depends(get_rooms)):
    summary = await rooms.get(room_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return summary
