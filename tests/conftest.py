import asyncio
import os
import tempfile
from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

_DB_FILE = os.path.join(tempfile.mkdtemp(prefix="hotel-tests-"), "test.db")

os.environ["DATABASE_URL_OVERRIDE"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["ENVIRONMENT"] = "test"
os.environ["ROOM_LOCK_BACKEND"] = "local"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from app.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from app.database import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.room import Room, RoomType  # noqa: E402


async def _reset_database() -> None:
    await drop_db()
    await init_db()


async def _seed_catalog() -> dict[str, int]:
    async with AsyncSessionLocal() as session:
        standard = RoomType(name="Standard", base_price=Decimal("100.00"), max_occupancy=2)
        suite = RoomType(name="Suite", base_price=Decimal("249.99"), max_occupancy=4)
        session.add_all([standard, suite])
        await session.flush()
        room_101 = Room(room_number="101", floor=1, room_type_id=standard.id)
        room_102 = Room(room_number="102", floor=1, room_type_id=standard.id)
        room_301 = Room(room_number="301", floor=3, room_type_id=suite.id, status="maintenance")
        session.add_all([room_101, room_102, room_301])
        await session.commit()
        return {"101": room_101.id, "102": room_102.id, "301": room_301.id}


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    asyncio.run(_reset_database())
    yield
    asyncio.run(drop_db())


@pytest.fixture()
def rooms() -> dict[str, int]:
    """Room ids by room number."""
    return asyncio.run(_seed_catalog())


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client

