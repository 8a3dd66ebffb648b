from collections import defaultdict

import pytest

from backend import MemoryRoomRegistry
from routers.signaling import SignalingRouter


class RecordingTransport:
    """In-process stand-in for socket.io delivery.

    Each connected sid is implicitly addressable by its own id; named rooms
    are tracked explicitly. Every delivered event is recorded per receiver.
    """

    def __init__(self):
        self.connected = set()
        self.rooms = defaultdict(set)
        self.received = defaultdict(list)

    def connect(self, sid):
        self.connected.add(sid)

    def drop(self, sid):
        self.connected.discard(sid)
        for members in self.rooms.values():
            members.discard(sid)

    def is_connected(self, sid):
        return sid in self.connected

    async def enter_room(self, sid, room_id):
        self.rooms[room_id].add(sid)

    async def send(self, event, *args, to, skip_sid=None):
        targets = set(self.rooms.get(to, set()))
        if to in self.connected:
            targets.add(to)
        targets.discard(skip_sid)
        for sid in targets:
            self.received[sid].append((event, args))

    def all_events(self):
        return {sid: events for sid, events in self.received.items() if events}


class FakeServer:
    def __init__(self):
        self.handlers = {}

    def on(self, event, handler):
        self.handlers[event] = handler


@pytest.fixture
def registry():
    return MemoryRoomRegistry()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def signaling(registry, transport):
    return SignalingRouter(registry, transport)


@pytest.fixture
def peers(transport):
    for sid in ("host", "guest", "other"):
        transport.connect(sid)
    return transport


@pytest.fixture
def fake_server():
    return FakeServer()
