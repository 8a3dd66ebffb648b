import random
import string
from typing import Dict, List, Optional

import redis.asyncio as redis
from redis.exceptions import WatchError

from constants import ROOM_ID_LENGTH, ROOM_ID_MAX_ATTEMPTS
from redis_keys import REDIS_ROOM_KEY, REDIS_HOST_ROOMS_KEY, REDIS_ROOM_PATTERN
from schemas.rooms import Room
from logging_config import get_logger

logger = get_logger(__name__)

ROOM_ID_ALPHABET = string.ascii_lowercase + string.digits


class RoomRegistryError(Exception):
    """Base class for room registry failures."""


class RoomIdCollisionError(RoomRegistryError):
    """No free room id was found within the allowed number of attempts."""


def generate_room_id(length: int = ROOM_ID_LENGTH) -> str:
    return ''.join(random.choices(ROOM_ID_ALPHABET, k=length))


class MemoryRoomRegistry:
    """Room registry held in a dict owned by this instance.

    None of the methods await, so every call completes atomically on the
    event loop and a concurrently scheduled handler never sees a half-applied
    update.
    """

    backend_name = "memory"

    def __init__(self, id_length: int = ROOM_ID_LENGTH, max_attempts: int = ROOM_ID_MAX_ATTEMPTS):
        self.id_length = id_length
        self.max_attempts = max_attempts
        self._rooms: Dict[str, str] = {}
        logger.info("Initializing in-memory room registry")

    async def create(self, host_id: str) -> str:
        for attempt in range(1, self.max_attempts + 1):
            room_id = generate_room_id(self.id_length)
            if room_id in self._rooms:
                logger.debug(f"Room id {room_id} already live, regenerating (attempt {attempt})")
                continue
            self._rooms[room_id] = host_id
            logger.info(f"Room {room_id} created by host {host_id}")
            return room_id
        raise RoomIdCollisionError(f"No free room id after {self.max_attempts} attempts")

    async def lookup(self, room_id) -> Optional[Room]:
        if not isinstance(room_id, str):
            return None
        host = self._rooms.get(room_id)
        if host is None:
            logger.debug(f"Room {room_id} not found")
            return None
        return Room(room_id=room_id, host=host)

    async def remove_if_host(self, connection_id: str) -> List[str]:
        removed = [room_id for room_id, host in self._rooms.items() if host == connection_id]
        for room_id in removed:
            del self._rooms[room_id]
        if removed:
            logger.info(f"Removed rooms {removed} hosted by {connection_id}")
        return removed

    async def count(self) -> int:
        return len(self._rooms)

    async def ping(self) -> bool:
        return True

    async def close(self):
        self._rooms.clear()


class RedisRoomRegistry:
    """Room registry shared by every worker connected to the same Redis."""

    backend_name = "redis"

    def __init__(self, redis_client, id_length: int = ROOM_ID_LENGTH, max_attempts: int = ROOM_ID_MAX_ATTEMPTS):
        self.redis_client = redis_client
        self.id_length = id_length
        self.max_attempts = max_attempts
        logger.info("Initializing Redis room registry")

    @classmethod
    def from_url(cls, redis_url: str, **kwargs):
        client = redis.Redis.from_url(redis_url, decode_responses=True)
        return cls(client, **kwargs)

    async def create(self, host_id: str) -> str:
        index_key = REDIS_HOST_ROOMS_KEY.format(connection_id=host_id)
        async with self.redis_client.pipeline(transaction=True) as pipe:
            for attempt in range(1, self.max_attempts + 1):
                room_id = generate_room_id(self.id_length)
                key = REDIS_ROOM_KEY.format(slug=room_id)
                try:
                    await pipe.watch(key)
                    # never overwrite a live room
                    if await pipe.exists(key):
                        await pipe.reset()
                        logger.debug(f"Room id {room_id} already live, regenerating (attempt {attempt})")
                        continue
                    # room key and host index are written in one MULTI/EXEC
                    pipe.multi()
                    pipe.set(key, host_id)
                    pipe.sadd(index_key, room_id)
                    await pipe.execute()
                except WatchError:
                    logger.debug(f"Room id {room_id} taken concurrently, regenerating (attempt {attempt})")
                    continue
                logger.info(f"Room {room_id} created by host {host_id}")
                return room_id
        raise RoomIdCollisionError(f"No free room id after {self.max_attempts} attempts")

    async def lookup(self, room_id) -> Optional[Room]:
        if not isinstance(room_id, str):
            return None
        host = await self.redis_client.get(REDIS_ROOM_KEY.format(slug=room_id))
        if host is None:
            logger.debug(f"Room {room_id} not found in Redis")
            return None
        return Room(room_id=room_id, host=host)

    async def remove_if_host(self, connection_id: str) -> List[str]:
        index_key = REDIS_HOST_ROOMS_KEY.format(connection_id=connection_id)
        async with self.redis_client.pipeline(transaction=True) as pipe:
            while True:
                try:
                    # a create for this host between the read and EXEC aborts the transaction
                    await pipe.watch(index_key)
                    room_ids = sorted(await pipe.smembers(index_key))
                    if not room_ids:
                        return []
                    pipe.multi()
                    for room_id in room_ids:
                        pipe.delete(REDIS_ROOM_KEY.format(slug=room_id))
                    pipe.delete(index_key)
                    await pipe.execute()
                except WatchError:
                    logger.debug(f"Rooms of {connection_id} changed during removal, retrying")
                    continue
                break
        logger.info(f"Removed rooms {room_ids} hosted by {connection_id}")
        return room_ids

    async def count(self) -> int:
        total = 0
        async for _ in self.redis_client.scan_iter(match=REDIS_ROOM_PATTERN):
            total += 1
        return total

    async def ping(self) -> bool:
        return await self.redis_client.ping()

    async def close(self):
        await self.redis_client.aclose()


def build_registry(redis_url: Optional[str] = None):
    if redis_url:
        logger.info("REDIS_URL set, using Redis room registry")
        return RedisRoomRegistry.from_url(redis_url)
    return MemoryRoomRegistry()
