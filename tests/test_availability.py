"""Tests for overlap detection against blocking bookings."""
import asyncio
from datetime import date

import pytest

from app.core.exceptions import InvalidInputError, NotFoundError
from app.core.permissions import Principal, UserRole
from app.database import AsyncSessionLocal
from app.domain.booking_state import BookingStatus
from app.services.availability_service import availability_service
from app.services.booking_service import booking_service

ADMIN = Principal(user_id=1, role=UserRole.ADMIN)
ALICE = Principal(user_id=101, role=UserRole.CUSTOMER)


async def _book(room_id: int, check_in: date, check_out: date, principal: Principal = ALICE):
    async with AsyncSessionLocal() as db:
        return await booking_service.create_booking(db, principal, room_id, check_in, check_out)


async def _set_status(booking_id: int, status: BookingStatus):
    async with AsyncSessionLocal() as db:
        return await booking_service.transition_status(db, booking_id, status, ADMIN)


async def _check(room_id: int, check_in: date, check_out: date):
    async with AsyncSessionLocal() as db:
        return await availability_service.check_availability(db, room_id, check_in, check_out)


def test_empty_room_is_available(rooms):
    result = asyncio.run(_check(rooms["101"], date(2024, 6, 1), date(2024, 6, 5)))

    assert result.available
    assert result.conflicting_ids == []


@pytest.mark.parametrize(
    "check_in,check_out,expected_conflict",
    [
        (date(2024, 6, 3), date(2024, 6, 7), True),   # overlaps the tail
        (date(2024, 5, 28), date(2024, 6, 2), True),  # overlaps the head
        (date(2024, 6, 2), date(2024, 6, 3), True),   # inside
        (date(2024, 5, 20), date(2024, 6, 20), True),  # encloses
        (date(2024, 6, 5), date(2024, 6, 7), False),  # starts on check-out day
        (date(2024, 5, 28), date(2024, 6, 1), False),  # ends on check-in day
    ],
)
def test_half_open_overlap(rooms, check_in, check_out, expected_conflict):
    async def scenario():
        booking = await _book(rooms["101"], date(2024, 6, 1), date(2024, 6, 5))
        result = await _check(rooms["101"], check_in, check_out)
        return booking, result

    booking, result = asyncio.run(scenario())

    assert result.available is not expected_conflict
    if expected_conflict:
        assert result.conflicting_ids == [booking.id]


def test_other_rooms_do_not_conflict(rooms):
    async def scenario():
        await _book(rooms["101"], date(2024, 6, 1), date(2024, 6, 5))
        return await _check(rooms["102"], date(2024, 6, 1), date(2024, 6, 5))

    assert asyncio.run(scenario()).available


@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.CHECKED_OUT])
def test_non_blocking_bookings_are_ignored(rooms, status):
    async def scenario():
        booking = await _book(rooms["101"], date(2024, 6, 1), date(2024, 6, 5))
        if status == BookingStatus.CHECKED_OUT:
            await _set_status(booking.id, BookingStatus.CONFIRMED)
            await _set_status(booking.id, BookingStatus.CHECKED_IN)
        await _set_status(booking.id, status)
        return await _check(rooms["101"], date(2024, 6, 1), date(2024, 6, 5))

    assert asyncio.run(scenario()).available


def test_conflicts_ordered_by_check_in_and_repeatable(rooms):
    async def scenario():
        later = await _book(rooms["101"], date(2024, 6, 10), date(2024, 6, 12))
        earlier = await _book(rooms["101"], date(2024, 6, 1), date(2024, 6, 3))
        first = await _check(rooms["101"], date(2024, 5, 30), date(2024, 6, 15))
        second = await _check(rooms["101"], date(2024, 5, 30), date(2024, 6, 15))
        return earlier, later, first, second

    earlier, later, first, second = asyncio.run(scenario())

    assert first.conflicting_ids == [earlier.id, later.id]
    assert second.conflicting_ids == first.conflicting_ids


def test_unknown_room(rooms):
    with pytest.raises(NotFoundError):
        asyncio.run(_check(9999, date(2024, 6, 1), date(2024, 6, 5)))


def test_invalid_range(rooms):
    with pytest.raises(InvalidInputError):
        asyncio.run(_check(rooms["101"], date(2024, 6, 5), date(2024, 6, 5)))
