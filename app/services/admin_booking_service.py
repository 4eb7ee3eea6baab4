"""Privileged booking operations for hotel staff.

Admins act on any booking regardless of owner and may use the front-desk
transitions, but every change is still validated against the transition
table and recorded as a forced change in the history.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Permission, Principal, require_admin, require_permission
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.schemas.booking import BookingFilters
from app.services.booking_service import BookingService, booking_service


class AdminBookingService:
    """Admin override interface over ``BookingService``."""

    def __init__(self, bookings: BookingService = booking_service):
        self.bookings = bookings

    async def set_status(
        self,
        db: AsyncSession,
        booking_id: int,
        admin: Principal,
        status: str | BookingStatus,
        reason: str | None = None,
    ) -> Booking:
        require_admin(admin)
        return await self.bookings.transition_status(
            db, booking_id, status, admin, reason=reason, forced=True
        )

    async def force_cancel(
        self, db: AsyncSession, booking_id: int, admin: Principal, reason: str | None = None
    ) -> Booking:
        return await self.set_status(db, booking_id, admin, BookingStatus.CANCELLED, reason)

    async def check_in(self, db: AsyncSession, booking_id: int, admin: Principal) -> Booking:
        require_permission(admin, Permission.FRONT_DESK)
        return await self.set_status(db, booking_id, admin, BookingStatus.CHECKED_IN)

    async def check_out(self, db: AsyncSession, booking_id: int, admin: Principal) -> Booking:
        require_permission(admin, Permission.FRONT_DESK)
        return await self.set_status(db, booking_id, admin, BookingStatus.CHECKED_OUT)

    async def list_all_bookings(
        self, db: AsyncSession, admin: Principal, filters: BookingFilters | None = None
    ) -> tuple[list[Booking], int]:
        require_admin(admin)
        return await self.bookings.list_bookings(db, admin, filters)


admin_booking_service = AdminBookingService()
