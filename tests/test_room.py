"""Unit tests for RoomManager."""

import asyncio
import random

import pytest

from roomrelay.constants import CLOSE_SEND_FAILED
from roomrelay.errors import RoomNotFound
from roomrelay.room import RoomManager
from roomrelay.schemas import RoomAction, RoomMessage


def message(action=RoomAction.EVENT, client_id="alice", body="hi"):
    return RoomMessage(action=action, client_id=client_id, body=body)


@pytest.mark.unit
class TestRoomMembership:
    """Create / join / exit state machine."""

    @pytest.mark.asyncio
    async def test_create_makes_single_member_room(self, rooms: RoomManager, make_client):
        c1 = make_client("c1")

        assert await rooms.create("r1", c1) is True
        assert "r1" in rooms
        assert await rooms.members("r1") == [c1]

    @pytest.mark.asyncio
    async def test_second_create_is_noop(self, rooms: RoomManager, make_client):
        c1, c2 = make_client("c1"), make_client("c2")
        await rooms.create("r1", c1)

        assert await rooms.create("r1", c2) is False
        assert await rooms.members("r1") == [c1]

    @pytest.mark.asyncio
    async def test_join_before_create_fails(self, rooms: RoomManager, make_client):
        with pytest.raises(RoomNotFound) as exc:
            await rooms.join("r2", make_client("c1"))
        assert exc.value.room_id == "r2"
        assert "r2" not in rooms

    @pytest.mark.asyncio
    async def test_rejoin_is_idempotent(self, rooms: RoomManager, make_client):
        c1, c2 = make_client("c1"), make_client("c2")
        await rooms.create("r1", c1)

        assert await rooms.join("r1", c2) is True
        assert await rooms.join("r1", c2) is False
        assert await rooms.join("r1", make_client("c2")) is False
        members = await rooms.members("r1")
        assert [m.identity for m in members] == ["c1", "c2"]
        assert members[1] is c2

    @pytest.mark.asyncio
    async def test_last_exit_deletes_room(self, rooms: RoomManager, make_client):
        c1, c2, c3 = make_client("c1"), make_client("c2"), make_client("c3")
        await rooms.create("r1", c1)
        await rooms.join("r1", c2)

        assert await rooms.exit("r1", "c1") is True
        assert "r1" in rooms
        assert await rooms.exit("r1", "c2") is True
        assert "r1" not in rooms
        assert await rooms.get("r1") is None

        with pytest.raises(RoomNotFound):
            await rooms.join("r1", c3)

    @pytest.mark.asyncio
    async def test_exit_missing_room(self, rooms: RoomManager):
        with pytest.raises(RoomNotFound):
            await rooms.exit("nowhere", "c1")

    @pytest.mark.asyncio
    async def test_exit_of_non_member_keeps_room(self, rooms: RoomManager, make_client):
        await rooms.create("r1", make_client("c1"))

        assert await rooms.exit("r1", "stranger") is False
        assert "r1" in rooms

    @pytest.mark.asyncio
    async def test_exit_guarded_by_connection(self, rooms: RoomManager, make_client):
        """A second connection reusing an identity cannot evict the member."""
        member = make_client("c1")
        impostor = make_client("c1")
        await rooms.create("r1", member)

        assert await rooms.exit("r1", "c1", impostor) is False
        assert await rooms.members("r1") == [member]

    @pytest.mark.asyncio
    async def test_summaries(self, rooms: RoomManager, make_client):
        await rooms.create("b", make_client("x"))
        await rooms.create("a", make_client("z"))
        await rooms.join("a", make_client("y"))

        summaries = await rooms.summaries()

        assert [s.room_id for s in summaries] == ["a", "b"]
        assert summaries[0].members == ["y", "z"]
        assert summaries[0].member_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_join_and_exit(self, rooms: RoomManager, make_client):
        owner = make_client("owner")
        await rooms.create("r1", owner)
        clients = [make_client(f"c{i}") for i in range(40)]
        rng = random.Random(7)
        stays = {c.identity for c in clients if rng.random() < 0.5}

        async def session(client):
            await rooms.join("r1", client)
            for _ in range(rng.randint(0, 3)):
                await asyncio.sleep(0)
            if client.identity not in stays:
                await rooms.exit("r1", client.identity, client)

        await asyncio.gather(*(session(c) for c in clients))

        members = await rooms.members("r1")
        assert sorted(m.identity for m in members) == sorted(stays | {"owner"})
        assert len({m.identity for m in members}) == len(members)


@pytest.mark.unit
class TestRoomBroadcast:
    @pytest.mark.asyncio
    async def test_broadcast_reaches_every_member(self, rooms: RoomManager, make_client):
        c1, c2, outsider = make_client("c1"), make_client("c2"), make_client("out")
        await rooms.create("r1", c1)
        await rooms.join("r1", c2)
        await rooms.create("r2", outsider)

        sent = await rooms.broadcast("r1", message(client_id="c1", body="hello"))

        assert sent == 2
        expected = {"action": "event", "client_id": "c1", "body": "hello"}
        assert c1.connection.messages == [expected]
        assert c2.connection.messages == [expected]
        assert outsider.connection.sent == []

    @pytest.mark.asyncio
    async def test_broadcast_exclude(self, rooms: RoomManager, make_client):
        c1, c2 = make_client("c1"), make_client("c2")
        await rooms.create("r1", c1)
        await rooms.join("r1", c2)

        assert await rooms.broadcast("r1", message(), exclude=c1) == 1
        assert c1.connection.sent == []

    @pytest.mark.asyncio
    async def test_broadcast_to_missing_room(self, rooms: RoomManager):
        assert await rooms.broadcast("nowhere", message()) == 0

    @pytest.mark.asyncio
    async def test_send_failure_removes_member(self, rooms: RoomManager, make_client):
        healthy, broken = make_client("healthy"), make_client("broken", fail=True)
        await rooms.create("r1", healthy)
        await rooms.join("r1", broken)

        assert await rooms.broadcast("r1", message()) == 1
        assert [m.identity for m in await rooms.members("r1")] == ["healthy"]
        assert broken.connection.closed[0] == CLOSE_SEND_FAILED
        assert len(healthy.connection.sent) == 1

    @pytest.mark.asyncio
    async def test_send_failure_of_sole_member_deletes_room(self, rooms: RoomManager, make_client):
        await rooms.create("r1", make_client("broken", fail=True))

        assert await rooms.broadcast("r1", message()) == 0
        assert "r1" not in rooms
