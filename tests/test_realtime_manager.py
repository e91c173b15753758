import asyncio
import json

from familyhub.modules.chat.realtime import FamilyConnectionManager


class _FakeSocket:
    def __init__(self, broken: bool = False):
        self.broken = broken
        self.accepted = False
        self.sent: list[str] = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, data: str):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(data)


def test_broadcast_reaches_only_family_room():
    manager = FamilyConnectionManager()
    own = _FakeSocket()
    other = _FakeSocket()

    async def _run():
        await manager.connect(1, own)
        await manager.connect(2, other)
        return await manager.broadcast(1, "message", {"content": "hi"})

    delivered = asyncio.run(_run())

    assert delivered == 1
    assert own.accepted is True
    assert json.loads(own.sent[0]) == {"event": "message", "data": {"content": "hi"}}
    assert other.sent == []


def test_broken_socket_is_dropped():
    manager = FamilyConnectionManager()
    healthy = _FakeSocket()
    broken = _FakeSocket(broken=True)

    async def _run():
        await manager.connect(7, healthy)
        await manager.connect(7, broken)
        return await manager.broadcast(7, "message", {"id": 1})

    delivered = asyncio.run(_run())

    assert delivered == 1
    assert manager.room_size(7) == 1


def test_disconnect_removes_empty_room():
    manager = FamilyConnectionManager()
    socket = _FakeSocket()

    async def _run():
        await manager.connect(3, socket)
        await manager.disconnect(3, socket)
        return await manager.broadcast(3, "message", {})

    assert asyncio.run(_run()) == 0
    assert 3 not in manager.rooms
