"""Room-scoped mutual exclusion.

Creating a booking is a check-then-insert; two requests for the same room
must never run it at the same time. Every create holds the room's lock from
the availability check until the insert is committed or rolled back. Locks
are per room: bookings for different rooms never wait on each other.

Two backends are available:

- ``local``: one ``asyncio.Lock`` per room inside this process. Entries are
  reference counted and dropped as soon as nobody holds or waits on them.
- ``redis``: a ``redis.asyncio`` lock shared by every worker process.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import redis.asyncio as redis
from redis.exceptions import LockError, RedisError

from app.config import settings
from app.core.exceptions import BusyError, UnavailableError

logger = logging.getLogger(__name__)


class RoomLockManager(ABC):
    """Hands out exclusive, time-bounded holds on a single room."""

    def __init__(self, timeout: float):
        self.timeout = timeout

    @abstractmethod
    def hold(self, room_id: int) -> "AsyncIterator[None]":
        """Async context manager holding the room's lock.

        Raises:
            BusyError: if the lock cannot be acquired within ``timeout``
        """

    async def close(self) -> None:
        """Release backend resources."""


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class LocalRoomLockManager(RoomLockManager):
    """In-process per-room locks."""

    def __init__(self, timeout: float):
        super().__init__(timeout)
        self._entries: dict[int, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        entry = self._entries.get(room_id)
        if entry is None:
            entry = self._entries[room_id] = _LockEntry()
        entry.users += 1
        try:
            try:
                await asyncio.wait_for(entry.lock.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Timed out after {self.timeout}s waiting for room {room_id} lock")
                raise BusyError(f"Room {room_id} is busy. Please retry shortly.")
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(room_id) is entry:
                del self._entries[room_id]

    def active_rooms(self) -> set[int]:
        """Rooms that currently have a holder or waiter."""
        return set(self._entries)


class RedisRoomLockManager(RoomLockManager):
    """Per-room locks shared across processes through Redis."""

    def __init__(self, timeout: float, lease: float, redis_url: str | None = None):
        super().__init__(timeout)
        self.lease = lease
        self.redis_url = redis_url or settings.redis_url
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        try:
            client = await self.get_redis()
            lock = client.lock(
                f"room-lock:{room_id}",
                timeout=self.lease,
                blocking_timeout=self.timeout,
            )
            acquired = await lock.acquire()
        except RedisError as e:
            logger.error(f"Redis unavailable while locking room {room_id}: {e}")
            raise UnavailableError("redis", str(e)) from e

        if not acquired:
            logger.warning(f"Timed out after {self.timeout}s waiting for room {room_id} lock")
            raise BusyError(f"Room {room_id} is busy. Please retry shortly.")

        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.error(f"Room {room_id} lock lease expired before release")
            except RedisError as e:
                logger.error(f"Failed to release room {room_id} lock: {e}")

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


_room_lock_manager: RoomLockManager | None = None


def build_room_lock_manager() -> RoomLockManager:
    """Create the lock manager selected by ``ROOM_LOCK_BACKEND``."""
    if settings.room_lock_backend == "redis":
        return RedisRoomLockManager(
            timeout=settings.room_lock_timeout_seconds,
            lease=settings.room_lock_lease_seconds,
        )
    return LocalRoomLockManager(timeout=settings.room_lock_timeout_seconds)


def get_room_lock_manager() -> RoomLockManager:
    """Process-wide lock manager."""
    global _room_lock_manager
    if _room_lock_manager is None:
        _room_lock_manager = build_room_lock_manager()
    return _room_lock_manager


async def close_room_lock_manager() -> None:
    global _room_lock_manager
    if _room_lock_manager is not None:
        await _room_lock_manager.close()
        _room_lock_manager = None
