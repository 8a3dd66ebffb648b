import asyncio

import pytest
import socketio
import uvicorn

from app import create_app
from backend import MemoryRoomRegistry
from constants import ALLOWED_ORIGINS, ALLOWED_ORIGIN_PATTERNS
from cors import OriginPolicy
from routers.signaling import SignalingRouter
from transport import SocketIOTransport, create_socketio_server

SERVER_EVENTS = (
    "room-created",
    "user-joined",
    "room-not-found",
    "offer",
    "answer",
    "ice-candidate",
    "host-disconnected",
)


class Peer:
    """A socket.io client that queues every signaling event it receives."""

    def __init__(self):
        self.client = socketio.AsyncClient(reconnection=False)
        self.events = asyncio.Queue()
        for event in SERVER_EVENTS:
            self.client.on(event, self._recorder(event))

    def _recorder(self, event):
        async def record(*args):
            await self.events.put((event, args))
        return record

    @property
    def sid(self):
        return self.client.get_sid()

    async def connect(self, url):
        await self.client.connect(url, transports=["websocket"], wait_timeout=5)

    async def next_event(self):
        return await asyncio.wait_for(self.events.get(), timeout=5)


@pytest.fixture
async def live_server(unused_tcp_port):
    registry = MemoryRoomRegistry()
    policy = OriginPolicy(ALLOWED_ORIGINS, ALLOWED_ORIGIN_PATTERNS)
    sio = create_socketio_server(policy)
    SignalingRouter(registry, SocketIOTransport(sio)).register(sio)
    asgi_app = socketio.ASGIApp(sio, other_asgi_app=create_app(registry, policy))

    config = uvicorn.Config(asgi_app, host="127.0.0.1", port=unused_tcp_port, log_level="warning", lifespan="off")
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve())
    while not server.started:
        await asyncio.sleep(0.01)

    yield f"http://127.0.0.1:{unused_tcp_port}", registry

    server.should_exit = True
    await task


@pytest.fixture
async def host_and_guest(live_server):
    url, _ = live_server
    host, guest = Peer(), Peer()
    await host.connect(url)
    await guest.connect(url)
    yield host, guest
    for peer in (host, guest):
        if peer.client.connected:
            await peer.client.disconnect()


async def test_handshake_over_real_socketio_server(live_server, host_and_guest):
    _, registry = live_server
    host, guest = host_and_guest

    await host.client.emit("create-room")
    event, args = await host.next_event()
    assert event == "room-created"
    room_id = args[0]
    assert (await registry.lookup(room_id)).host == host.sid

    await guest.client.emit("join-room", room_id)
    assert await host.next_event() == ("user-joined", (guest.sid,))

    offer = {"type": "offer", "sdp": "v=0\r\n"}
    await guest.client.emit("offer", (offer, room_id, host.sid))
    assert await host.next_event() == ("offer", (offer, guest.sid))

    candidate = {"candidate": "candidate:1 1 udp 1 10.0.0.2 5000 typ host", "sdpMLineIndex": 0}
    await host.client.emit("ice-candidate", (candidate, room_id, guest.sid))
    assert await guest.next_event() == ("ice-candidate", (candidate, host.sid))
    # the joiner is never told about its own join
    assert guest.events.empty()

    await host.client.disconnect()
    assert await guest.next_event() == ("host-disconnected", ())
    assert await registry.lookup(room_id) is None


async def test_unknown_room_reply_carries_no_arguments(host_and_guest):
    _, guest = host_and_guest

    await guest.client.emit("join-room", "nonexistent")

    assert await guest.next_event() == ("room-not-found", ())


async def test_relay_addressed_to_sender_is_not_echoed(host_and_guest):
    host, guest = host_and_guest

    await guest.client.emit("answer", ({"sdp": "x"}, "room", guest.sid))
    await guest.client.emit("answer", ({"sdp": "y"}, "room", host.sid))

    assert await host.next_event() == ("answer", ({"sdp": "y"}, guest.sid))
    assert guest.events.empty()
