"""Booking store.

All methods run on the caller's ``AsyncSession``; the session's transaction
is the atomic unit. Nothing is cached between calls.
"""

from datetime import date
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.booking_state import BLOCKING_STATUSES, BookingStatus
from app.models.booking import Booking, BookingStatusChange
from app.schemas.booking import BookingFilters

_BLOCKING_VALUES = [s.value for s in BLOCKING_STATUSES]


class BookingRepository:
    """Persistence operations for bookings and their history."""

    async def find_blocking_bookings(
        self,
        db: AsyncSession,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: int | None = None,
    ) -> list[Booking]:
        """Blocking bookings for the room that overlap [check_in, check_out).

        Two half-open ranges overlap unless one ends on or before the other
        starts, which reduces to ``existing.check_in < check_out`` and
        ``existing.check_out > check_in``.
        """
        query = (
            select(Booking)
            .where(
                Booking.room_id == room_id,
                Booking.status.in_(_BLOCKING_VALUES),
                Booking.check_in < check_out,
                Booking.check_out > check_in,
            )
            .order_by(Booking.check_in, Booking.id)
            .execution_options(populate_existing=True)
        )
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def insert_booking(self, db: AsyncSession, booking: Booking) -> int:
        """Insert a booking and return its assigned id."""
        db.add(booking)
        await db.flush()
        return booking.id

    async def get_booking(self, db: AsyncSession, booking_id: int) -> Booking | None:
        """Read the booking's persisted state, bypassing the identity map."""
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_booking_status(
        self,
        db: AsyncSession,
        booking_id: int,
        expected_status: BookingStatus,
        new_status: BookingStatus,
        values: dict[str, Any] | None = None,
    ) -> bool:
        """Compare-and-set the status.

        Returns False when the row no longer has ``expected_status`` (or does
        not exist), leaving it untouched.
        """
        result = await db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == expected_status.value)
            .values(status=new_status.value, updated_at=func.now(), **(values or {}))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_bookings(
        self,
        db: AsyncSession,
        filters: BookingFilters,
        user_id: int | None = None,
    ) -> tuple[list[Booking], int]:
        """Page of bookings, newest first, with the total match count."""
        query = select(Booking)

        if user_id is not None:
            query = query.where(Booking.user_id == user_id)
        if filters.status:
            query = query.where(Booking.status == filters.status.value)
        if filters.room_id is not None:
            query = query.where(Booking.room_id == filters.room_id)
        if filters.from_date:
            query = query.where(Booking.check_out > filters.from_date)
        if filters.to_date:
            query = query.where(Booking.check_in < filters.to_date)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (filters.page - 1) * filters.page_size
        query = (
            query.order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset(offset)
            .limit(filters.page_size)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def add_status_change(
        self,
        db: AsyncSession,
        booking_id: int,
        from_status: BookingStatus | None,
        to_status: BookingStatus,
        actor_id: int,
        actor_role: str,
        forced: bool = False,
        reason: str | None = None,
    ) -> BookingStatusChange:
        change = BookingStatusChange(
            booking_id=booking_id,
            from_status=from_status.value if from_status else None,
            to_status=to_status.value,
            actor_id=actor_id,
            actor_role=actor_role,
            forced=forced,
            reason=reason,
        )
        db.add(change)
        return change

    async def get_status_history(self, db: AsyncSession, booking_id: int) -> list[BookingStatusChange]:
        result = await db.execute(
            select(BookingStatusChange)
            .where(BookingStatusChange.booking_id == booking_id)
            .order_by(BookingStatusChange.id)
        )
        return list(result.scalars().all())


booking_repository = BookingRepository()
