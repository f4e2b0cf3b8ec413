from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from .client import Client
from .constants import CLOSE_SEND_FAILED, SEND_FAILED_REASON
from .errors import RoomNotFound, SendFailure
from .schemas import RoomMessage, RoomSummary

logger = logging.getLogger(__name__)


class Room:
    """A named group of clients that receive each other's broadcasts."""

    def __init__(self, room_id: str, owner: Client):
        self.room_id = room_id
        # identity -> client; an identity is present at most once
        self.members: Dict[str, Client] = {owner.identity: owner}

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, identity: object) -> bool:
        return identity in self.members

    def summary(self) -> RoomSummary:
        return RoomSummary(
            room_id=self.room_id,
            member_count=len(self.members),
            members=sorted(self.members),
        )


class RoomManager:
    """Owns every live :class:`Room` and serializes membership changes.

    A room exists only while it has members: the last ``exit`` deletes it.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    # -------------------- Membership -------------------- #

    async def create(self, room_id: str, client: Client) -> bool:
        """Create *room_id* with *client* as its only member.

        Creating a room that already exists succeeds without touching it and
        returns ``False``.
        """
        async with self._lock:
            if room_id in self._rooms:
                logger.info("Room %r already exists; create by %r ignored", room_id, client.identity)
                return False
            self._rooms[room_id] = Room(room_id, client)
        logger.info("Room %r created by %r", room_id, client.identity)
        return True

    async def join(self, room_id: str, client: Client) -> bool:
        """Add *client* to *room_id*; ``False`` if the identity is already a member."""
        async with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            if client.identity in room.members:
                logger.info("%r is already in room %r", client.identity, room_id)
                return False
            room.members[client.identity] = client
        logger.info("%r joined room %r", client.identity, room_id)
        return True

    async def exit(self, room_id: str, client_id: str, client: Optional[Client] = None) -> bool:
        """Remove *client_id* from *room_id*, deleting the room once it is empty.

        When *client* is given only that exact member entry is removed. Returns
        whether a member was removed.
        """
        async with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            current = room.members.get(client_id)
            removed = current is not None and (client is None or current is client)
            if removed:
                del room.members[client_id]
            if not room.members:
                del self._rooms[room_id]
                logger.info("Room %r is empty; deleted", room_id)
        return removed

    # -------------------- Queries -------------------- #

    async def get(self, room_id: str) -> Optional[RoomSummary]:
        async with self._lock:
            room = self._rooms.get(room_id)
            return room.summary() if room else None

    async def members(self, room_id: str) -> List[Client]:
        async with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            return list(room.members.values())

    async def summaries(self) -> List[RoomSummary]:
        async with self._lock:
            return [self._rooms[rid].summary() for rid in sorted(self._rooms)]

    async def clear(self) -> List[Client]:
        async with self._lock:
            clients = [c for room in self._rooms.values() for c in room.members.values()]
            self._rooms.clear()
        return clients

    # -------------------- Broadcasting -------------------- #

    async def broadcast(self, room_id: str, message: RoomMessage, exclude: Optional[Client] = None) -> int:
        """Send *message* to every current member of *room_id*; return the count sent.

        A member whose send fails is removed from the room.
        """
        try:
            recipients = await self.members(room_id)
        except RoomNotFound:
            logger.debug("Broadcast to missing room %r dropped", room_id)
            return 0

        data = message.dumps()
        sent = 0
        for member in recipients:
            if member is exclude or not member.is_open:
                continue
            try:
                await member.send(data)
            except SendFailure as exc:
                logger.warning("%s; removing from room %r", exc, room_id)
                try:
                    await self.exit(room_id, member.identity, member)
                except RoomNotFound:
                    pass
                await member.close(code=CLOSE_SEND_FAILED, reason=SEND_FAILED_REASON)
                continue
            sent += 1
        return sent


__all__ = ["Room", "RoomManager"]
