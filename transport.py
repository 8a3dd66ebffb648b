from typing import Optional

import socketio

from cors import OriginPolicy
from redis_keys import REDIS_CHANNEL
from logging_config import get_logger

logger = get_logger(__name__)


class SocketIOTransport:
    """The slice of socket.io the signaling core depends on.

    Every socket.io connection is also a member of a room named after its
    sid, so ``to`` addresses either a single connection or a named room.
    """

    def __init__(self, sio: socketio.AsyncServer, namespace: str = "/"):
        self.sio = sio
        self.namespace = namespace

    def is_connected(self, sid: str) -> bool:
        # False once the disconnect of sid has started
        return self.sio.manager.is_connected(sid, self.namespace)

    async def enter_room(self, sid: str, room_id: str):
        await self.sio.enter_room(sid, room_id, namespace=self.namespace)

    async def send(self, event: str, *args, to: str, skip_sid: Optional[str] = None):
        # A tuple is unpacked into separate event arguments on the client
        await self.sio.emit(event, args, to=to, skip_sid=skip_sid, namespace=self.namespace)


def create_socketio_server(
    origin_policy: OriginPolicy,
    redis_url: Optional[str] = None,
    debug: bool = False,
) -> socketio.AsyncServer:
    client_manager = None
    if redis_url:
        logger.info("Using Redis socket.io manager for cross-process fan-out")
        client_manager = socketio.AsyncRedisManager(redis_url, channel=REDIS_CHANNEL)
    # engine.io reports rejected handshakes and transport errors through this logger
    engineio_logger = get_logger(f"{__name__}.engineio") if debug else False
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=origin_policy.is_allowed,
        cors_credentials=True,
        client_manager=client_manager,
        transports=["polling", "websocket"],
        engineio_logger=engineio_logger,
    )
