"""Tests for room-scoped locking."""
import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError

from app.core.exceptions import BusyError, UnavailableError
from app.core.locks import (
    LocalRoomLockManager,
    RedisRoomLockManager,
    build_room_lock_manager,
)


def test_hold_is_exclusive_per_room():
    manager = LocalRoomLockManager(timeout=1.0)
    events = []

    async def worker(name: str):
        async with manager.hold(1):
            events.append(f"{name}:in")
            await asyncio.sleep(0.01)
            events.append(f"{name}:out")

    async def scenario():
        await asyncio.gather(worker("a"), worker("b"))

    asyncio.run(scenario())

    assert events in (
        ["a:in", "a:out", "b:in", "b:out"],
        ["b:in", "b:out", "a:in", "a:out"],
    )


def test_different_rooms_run_concurrently():
    manager = LocalRoomLockManager(timeout=0.5)

    async def scenario():
        async with manager.hold(1):
            async with manager.hold(2):
                return manager.active_rooms()

    assert asyncio.run(scenario()) == {1, 2}


def test_timeout_raises_busy():
    manager = LocalRoomLockManager(timeout=0.05)

    async def scenario():
        async with manager.hold(7):
            async with manager.hold(7):
                pass

    with pytest.raises(BusyError):
        asyncio.run(scenario())


def test_idle_rooms_hold_no_lock():
    manager = LocalRoomLockManager(timeout=0.05)

    async def scenario():
        async with manager.hold(3):
            assert manager.active_rooms() == {3}
        with pytest.raises(BusyError):
            async with manager.hold(4):
                async with manager.hold(4):
                    pass
        return manager.active_rooms()

    assert asyncio.run(scenario()) == set()


def test_lock_released_after_error():
    manager = LocalRoomLockManager(timeout=0.05)

    async def scenario():
        with pytest.raises(RuntimeError):
            async with manager.hold(5):
                raise RuntimeError("insert failed")
        async with manager.hold(5):
            return True

    assert asyncio.run(scenario())


def test_backend_selection(monkeypatch):
    from app.core import locks

    monkeypatch.setattr(locks.settings, "room_lock_backend", "redis")
    manager = build_room_lock_manager()
    assert isinstance(manager, RedisRoomLockManager)
    assert manager.timeout == locks.settings.room_lock_timeout_seconds

    monkeypatch.setattr(locks.settings, "room_lock_backend", "local")
    assert isinstance(build_room_lock_manager(), LocalRoomLockManager)


class FakeRedisLock:
    def __init__(self, acquire_result=True, acquire_error=None, release_error=None):
        self.acquire_result = acquire_result
        self.acquire_error = acquire_error
        self.release_error = release_error
        self.released = False

    async def acquire(self):
        if self.acquire_error is not None:
            raise self.acquire_error
        return self.acquire_result

    async def release(self):
        self.released = True
        if self.release_error is not None:
            raise self.release_error


class FakeRedis:
    def __init__(self, lock):
        self._lock = lock
        self.calls = []

    def lock(self, name, timeout=None, blocking_timeout=None):
        self.calls.append((name, timeout, blocking_timeout))
        return self._lock


def _redis_manager(lock):
    manager = RedisRoomLockManager(timeout=0.5, lease=30.0, redis_url="redis://localhost:6379/0")
    manager._redis = FakeRedis(lock)
    return manager


def test_redis_hold_acquires_and_releases():
    lock = FakeRedisLock()
    manager = _redis_manager(lock)

    async def scenario():
        async with manager.hold(7):
            return lock.released

    assert asyncio.run(scenario()) is False
    assert lock.released is True
    assert manager._redis.calls == [("room-lock:7", 30.0, 0.5)]


def test_redis_hold_timeout_is_busy():
    lock = FakeRedisLock(acquire_result=False)
    manager = _redis_manager(lock)

    async def scenario():
        async with manager.hold(7):
            pass

    with pytest.raises(BusyError):
        asyncio.run(scenario())
    assert lock.released is False


def test_redis_outage_is_unavailable():
    manager = _redis_manager(FakeRedisLock(acquire_error=RedisConnectionError("refused")))

    async def scenario():
        async with manager.hold(7):
            pass

    with pytest.raises(UnavailableError) as exc_info:
        asyncio.run(scenario())
    assert exc_info.value.status_code == 503
    assert isinstance(exc_info.value.__cause__, RedisConnectionError)


def test_redis_expired_lease_does_not_fail_the_holder():
    lock = FakeRedisLock(release_error=LockError("lease expired"))
    manager = _redis_manager(lock)

    async def scenario():
        async with manager.hold(7):
            return "done"

    assert asyncio.run(scenario()) == "done"
    assert lock.released is True
