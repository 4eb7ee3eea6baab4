"""Tests for the append-only booking history."""
import asyncio
from datetime import date

import pytest
from sqlalchemy import select

from app.core.immutability import ImmutabilityViolationError
from app.core.permissions import Principal, UserRole
from app.database import AsyncSessionLocal
from app.models.booking import BookingStatusChange
from app.services.booking_service import booking_service

ALICE = Principal(user_id=101, role=UserRole.CUSTOMER)


async def _create_booking(room_id: int):
    async with AsyncSessionLocal() as db:
        booking = await booking_service.create_booking(
            db, ALICE, room_id, date(2024, 5, 1), date(2024, 5, 3)
        )
    return booking.id


def test_history_rows_cannot_be_updated(rooms):
    async def scenario():
        booking_id = await _create_booking(rooms["101"])
        async with AsyncSessionLocal() as db:
            result = await db.execute(
                select(BookingStatusChange).where(BookingStatusChange.booking_id == booking_id)
            )
            change = result.scalar_one()
            change.reason = "rewritten"
            await db.flush()

    with pytest.raises(ImmutabilityViolationError):
        asyncio.run(scenario())


def test_history_rows_cannot_be_deleted(rooms):
    async def scenario():
        booking_id = await _create_booking(rooms["101"])
        async with AsyncSessionLocal() as db:
            result = await db.execute(
                select(BookingStatusChange).where(BookingStatusChange.booking_id == booking_id)
            )
            await db.delete(result.scalar_one())
            await db.flush()

    with pytest.raises(ImmutabilityViolationError):
        asyncio.run(scenario())
