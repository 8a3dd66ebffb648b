"""Socket.IO event handlers for room membership and WebRTC handshake relay.

Wire contract (event names and argument order are shared with existing
browser peers):

- ``create-room()`` -> ``room-created(roomId)`` to the creator
- ``join-room(roomId)`` -> ``user-joined(sid)`` to the other members, or
  ``room-not-found()`` to the joiner
- ``offer|answer|ice-candidate(payload, roomId, targetId)`` ->
  ``<same event>(payload, fromSid)`` to the target only
- on disconnect, ``host-disconnected()`` to every room the connection hosted
"""
from backend import RoomIdCollisionError
from logging_config import get_logger

logger = get_logger(__name__)

RELAY_EVENTS = ("offer", "answer", "ice-candidate")


class SignalingRouter:
    def __init__(self, registry, transport):
        self.registry = registry
        self.transport = transport

    def register(self, sio):
        sio.on("connect", self.on_connect)
        sio.on("disconnect", self.on_disconnect)
        sio.on("create-room", self.on_create_room)
        sio.on("join-room", self.on_join_room)
        for event in RELAY_EVENTS:
            sio.on(event, self._relay_handler(event))
        logger.debug("Signaling handlers registered")

    async def on_connect(self, sid: str, environ: dict = None, auth=None):
        origin = (environ or {}).get("HTTP_ORIGIN")
        logger.info(f"User connected: {sid} from origin: {origin}")

    async def on_create_room(self, sid: str, *_):
        try:
            room_id = await self.registry.create(sid)
        except RoomIdCollisionError as e:
            logger.error(f"Could not create room for {sid}: {e}")
            return
        # The host may have disconnected while the room was being written, after
        # its disconnect cleanup already ran.
        if not self.transport.is_connected(sid):
            logger.info(f"Host {sid} left before room {room_id} was announced, removing it")
            await self.registry.remove_if_host(sid)
            return
        await self.transport.enter_room(sid, room_id)
        await self.transport.send("room-created", room_id, to=sid)

    async def on_join_room(self, sid: str, room_id=None, *_):
        room = await self.registry.lookup(room_id)
        if room is None:
            logger.info(f"Join failed for {sid}: room {room_id} not found")
            await self.transport.send("room-not-found", to=sid)
            return
        await self.transport.enter_room(sid, room.room_id)
        await self.transport.send("user-joined", sid, to=room.room_id, skip_sid=sid)
        logger.info(f"User {sid} joined room {room.room_id} (host {room.host})")

    async def relay(self, event: str, sid: str, payload=None, room_id=None, target_id=None):
        if not isinstance(target_id, str) or not target_id:
            logger.warning(f"Dropping {event} from {sid}: missing target id")
            return
        # room_id is not used for routing
        logger.debug(f"Relaying {event} from {sid} to {target_id} (room {room_id})")
        await self.transport.send(event, payload, sid, to=target_id, skip_sid=sid)

    def _relay_handler(self, event: str):
        async def handler(sid, payload=None, room_id=None, target_id=None, *_):
            await self.relay(event, sid, payload, room_id, target_id)
        handler.__name__ = f"on_{event.replace('-', '_')}"
        return handler

    async def on_disconnect(self, sid: str, reason=None):
        logger.info(f"User disconnected: {sid} (reason: {reason})")
        vacated = await self.registry.remove_if_host(sid)
        for room_id in vacated:
            logger.info(f"Host {sid} left, closing room {room_id}")
            await self.transport.send("host-disconnected", to=room_id, skip_sid=sid)
