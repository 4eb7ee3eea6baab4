"""Booking admission and lifecycle service.

CRITICAL BUSINESS LOGIC:
- A room can never hold two blocking bookings (unpaid, confirmed,
  checked_in) whose [check_in, check_out) ranges overlap.
- Creation re-checks availability and inserts inside one atomic unit: the
  room lock is held from the check until the commit or rollback.
- Status only moves along the transition table in ``app.domain.booking_state``,
  validated against the freshest persisted status.
- Bookings are never deleted; checked_out and cancelled are terminal.
"""

import logging
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    AppException,
    BusyError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnavailableError,
)
from app.core.locks import RoomLockManager, get_room_lock_manager
from app.core.permissions import Permission, Principal, require_permission
from app.database import store_errors
from app.domain.booking_state import (
    INITIAL_STATUS,
    BookingStatus,
    assert_booking_transition,
    is_customer_transition,
    parse_status,
)
from app.domain.pricing import validate_stay_dates
from app.models.booking import Booking, BookingStatusChange
from app.repositories.booking_repository import BookingRepository, booking_repository
from app.repositories.room_repository import RoomRepository, room_repository
from app.schemas.booking import BookingFilters
from app.services.audit_service import AuditService, audit_service
from app.services.availability_service import (
    AvailabilityResult,
    AvailabilityService,
    availability_service,
)
from app.services.pricing_service import PriceQuote, PricingService, pricing_service

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATEs
LOCK_NOT_AVAILABLE = "55P03"
EXCLUSION_VIOLATION = "23P01"

# Status timestamp set when a booking enters each status
_STATUS_TIMESTAMPS = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.CHECKED_IN: "checked_in_at",
    BookingStatus.CHECKED_OUT: "checked_out_at",
    BookingStatus.CANCELLED: "cancelled_at",
}


def _sqlstate(error: DBAPIError) -> str | None:
    orig = error.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


class BookingService:
    """Creates bookings and moves them through their lifecycle."""

    def __init__(
        self,
        bookings: BookingRepository = booking_repository,
        rooms: RoomRepository = room_repository,
        availability: AvailabilityService = availability_service,
        pricing: PricingService = pricing_service,
        audit: AuditService = audit_service,
        lock_manager: RoomLockManager | None = None,
    ):
        self.bookings = bookings
        self.rooms = rooms
        self.availability = availability
        self.pricing = pricing
        self.audit = audit
        self._lock_manager = lock_manager

    @property
    def lock_manager(self) -> RoomLockManager:
        return self._lock_manager or get_room_lock_manager()

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    async def check_availability(
        self,
        db: AsyncSession,
        room_id: int,
        check_in: date,
        check_out: date,
    ) -> AvailabilityResult:
        with store_errors("checking availability"):
            return await self.availability.check_availability(db, room_id, check_in, check_out)

    async def compute_price(
        self,
        db: AsyncSession,
        room_id: int,
        check_in: date,
        check_out: date,
    ) -> PriceQuote:
        with store_errors("pricing a stay"):
            return await self.pricing.compute_price(db, room_id, check_in, check_out)

    async def get_booking(self, db: AsyncSession, booking_id: int, principal: Principal) -> Booking:
        """Get a booking visible to the principal."""
        with store_errors("reading a booking"):
            booking = await self.bookings.get_booking(db, booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))
        if not principal.is_admin and booking.user_id != principal.user_id:
            raise ForbiddenError(principal.role.value, "You can only access your own bookings")
        return booking

    async def get_status_history(
        self, db: AsyncSession, booking_id: int, principal: Principal
    ) -> list[BookingStatusChange]:
        await self.get_booking(db, booking_id, principal)
        with store_errors("reading booking history"):
            return await self.bookings.get_status_history(db, booking_id)

    async def list_bookings(
        self,
        db: AsyncSession,
        principal: Principal,
        filters: BookingFilters | None = None,
    ) -> tuple[list[Booking], int]:
        """Bookings newest first. Customers only ever see their own."""
        filters = filters or BookingFilters()
        if principal.can(Permission.VIEW_ALL_BOOKINGS):
            user_id = filters.user_id
        else:
            require_permission(principal, Permission.VIEW_OWN_BOOKINGS)
            if filters.user_id is not None and filters.user_id != principal.user_id:
                raise ForbiddenError(principal.role.value, "You can only list your own bookings")
            user_id = principal.user_id

        with store_errors("listing bookings"):
            return await self.bookings.list_bookings(db, filters, user_id=user_id)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _validate_request(
        self,
        check_in: date,
        check_out: date,
        guests: int,
        special_requests: str | None,
    ) -> None:
        validate_stay_dates(check_in, check_out)
        if guests <= 0:
            raise InvalidInputError(f"Guest count must be positive, got {guests}")
        if special_requests and len(special_requests) > settings.max_special_requests_length:
            raise InvalidInputError(
                f"Special requests cannot exceed {settings.max_special_requests_length} characters"
            )

    async def create_booking(
        self,
        db: AsyncSession,
        principal: Principal,
        room_id: int,
        check_in: date,
        check_out: date,
        guests: int = 1,
        special_requests: str | None = None,
        user_id: int | None = None,
    ) -> Booking:
        """Create an unpaid booking if the room is free for the stay.

        ``user_id`` books on behalf of another user and requires an admin.

        Raises:
            InvalidInputError: bad dates, guest count or notes
            NotFoundError: unknown room
            ConflictError: overlapping blocking bookings (their ids attached)
            ForbiddenError: booking for someone else without admin rights
            BusyError: the room lock could not be acquired in time
            UnavailableError: the store failed
        """
        require_permission(principal, Permission.CREATE_BOOKING)
        owner_id = principal.user_id if user_id is None else user_id
        if owner_id != principal.user_id:
            require_permission(principal, Permission.MANAGE_ANY_BOOKING)
        self._validate_request(check_in, check_out, guests, special_requests)

        async with self.lock_manager.hold(room_id):
            try:
                booking_id = await self._insert_if_available(
                    db, principal, owner_id, room_id, check_in, check_out, guests, special_requests
                )
            except AppException:
                await db.rollback()
                raise
            except IntegrityError as e:
                await db.rollback()
                raise await self._integrity_failure(db, e, room_id, check_in, check_out)
            except SQLAlchemyError as e:
                await db.rollback()
                if isinstance(e, DBAPIError) and _sqlstate(e) == LOCK_NOT_AVAILABLE:
                    logger.warning(f"Row lock timeout on room {room_id}")
                    raise BusyError(f"Room {room_id} is busy. Please retry shortly.") from e
                logger.error(f"Store failure creating booking for room {room_id}: {e}")
                raise UnavailableError("database", "booking could not be created") from e

            # The row is flushed; only the commit outcome is unknown from here on
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise await self._integrity_failure(db, e, room_id, check_in, check_out)
            except SQLAlchemyError as e:
                await db.rollback()
                return await self._recover_created(db, e, booking_id)

        logger.info(
            f"Booking {booking_id} created: room={room_id} user={owner_id} "
            f"{check_in.isoformat()}..{check_out.isoformat()}"
        )
        with store_errors("reading the created booking"):
            return await self.bookings.get_booking(db, booking_id)

    async def _insert_if_available(
        self,
        db: AsyncSession,
        principal: Principal,
        owner_id: int,
        room_id: int,
        check_in: date,
        check_out: date,
        guests: int,
        special_requests: str | None,
    ) -> int:
        """Check-then-insert. Must run under the room lock, before commit."""
        if db.get_bind().dialect.name == "postgresql":
            lock_timeout_ms = int(self.lock_manager.timeout * 1000)
            await db.execute(text(f"SET LOCAL lock_timeout = '{lock_timeout_ms}ms'"))

        room = await self.rooms.get_room(db, room_id, for_update=True)
        if room is None:
            raise NotFoundError("Room", str(room_id))
        if guests > room.room_type.max_occupancy:
            raise InvalidInputError(
                f"Room {room.room_number} allows at most {room.room_type.max_occupancy} guests"
            )

        result = await self.availability.find_conflicts(db, room_id, check_in, check_out)
        if not result.available:
            logger.info(
                f"Booking rejected for room {room_id} {check_in.isoformat()}..{check_out.isoformat()}: "
                f"conflicts with {result.conflicting_ids}"
            )
            raise ConflictError(result.conflicting_ids)

        quote = self.pricing.quote_for_room(room, check_in, check_out)
        booking = Booking(
            room_id=room_id,
            user_id=owner_id,
            check_in=check_in,
            check_out=check_out,
            guests=guests,
            nightly_rate=quote.nightly_rate,
            total_price=quote.total_price,
            currency=quote.currency,
            special_requests=special_requests,
            status=INITIAL_STATUS.value,
        )
        booking_id = await self.bookings.insert_booking(db, booking)
        await self.audit.log_status_change(db, booking_id, None, INITIAL_STATUS, principal)
        return booking_id

    async def _integrity_failure(
        self,
        db: AsyncSession,
        error: IntegrityError,
        room_id: int,
        check_in: date,
        check_out: date,
    ) -> AppException:
        """Map a rejected insert to the error the caller should see."""
        if _sqlstate(error) == EXCLUSION_VIOLATION:
            with store_errors("reading conflicting bookings"):
                conflicts = await self.bookings.find_blocking_bookings(db, room_id, check_in, check_out)
            logger.warning(f"Exclusion constraint rejected booking for room {room_id}")
            return ConflictError([b.id for b in conflicts])
        logger.error(f"Integrity error creating booking for room {room_id}: {error}")
        return UnavailableError("database", "booking insert was rejected")

    async def _recover_created(
        self,
        db: AsyncSession,
        error: SQLAlchemyError,
        booking_id: int,
    ) -> Booking:
        """Report success only if the flushed booking is visible after a failed commit."""
        logger.error(f"Store failure committing booking {booking_id}: {error}")
        with store_errors("verifying a failed booking commit"):
            booking = await self.bookings.get_booking(db, booking_id)
        if booking is None:
            raise UnavailableError("database", "booking could not be created") from error
        logger.warning(f"Booking {booking_id} was persisted despite a commit error")
        return booking

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _authorize_transition(
        self,
        principal: Principal,
        booking: Booking,
        current: BookingStatus,
        target: BookingStatus,
        forced: bool,
    ) -> None:
        if principal.is_admin:
            return
        if forced:
            raise ForbiddenError(principal.role.value, "Admin access required")
        if booking.user_id != principal.user_id:
            raise ForbiddenError(principal.role.value, "You can only change your own bookings")
        assert_booking_transition(current, target)
        if not is_customer_transition(current, target):
            raise ForbiddenError(
                principal.role.value,
                f"Only staff can move a booking from {current.value} to {target.value}",
            )
        require_permission(
            principal,
            Permission.CONFIRM_OWN_BOOKING
            if target == BookingStatus.CONFIRMED
            else Permission.CANCEL_OWN_BOOKING,
        )

    def _transition_values(self, target: BookingStatus, reason: str | None) -> dict[str, Any]:
        values: dict[str, Any] = {}
        column = _STATUS_TIMESTAMPS.get(target)
        if column:
            values[column] = datetime.now(UTC)
        if target == BookingStatus.CANCELLED and reason:
            values["cancellation_reason"] = reason
        return values

    async def transition_status(
        self,
        db: AsyncSession,
        booking_id: int,
        new_status: str | BookingStatus,
        principal: Principal,
        reason: str | None = None,
        forced: bool = False,
    ) -> Booking:
        """Move a booking to ``new_status``.

        The status is written with a compare-and-set against the status that
        was validated, so a concurrent change forces a re-read and a fresh
        validation instead of overwriting it. Price and dates never change.

        Raises:
            NotFoundError: unknown booking
            ForbiddenError: principal may not make this change
            IllegalTransitionError: not in the transition table
            BusyError: lost the compare-and-set on every attempt
            UnavailableError: the store failed and the outcome is not visible
        """
        target = parse_status(new_status)

        for attempt in range(1, settings.transition_max_attempts + 1):
            with store_errors("reading a booking"):
                booking = await self.bookings.get_booking(db, booking_id)
            if booking is None:
                raise NotFoundError("Booking", str(booking_id))

            current = parse_status(booking.status)
            self._authorize_transition(principal, booking, current, target, forced)
            assert_booking_transition(current, target)

            try:
                swapped = await self.bookings.update_booking_status(
                    db, booking_id, current, target, self._transition_values(target, reason)
                )
                if swapped:
                    await self.audit.log_status_change(
                        db, booking_id, current, target, principal, forced=forced, reason=reason
                    )
                    await db.commit()
                    break
                await db.rollback()
            except SQLAlchemyError as e:
                await db.rollback()
                return await self._confirm_transition(db, e, booking_id, target)

            logger.info(
                f"Booking {booking_id} changed while moving to {target.value} "
                f"(attempt {attempt}/{settings.transition_max_attempts})"
            )
        else:
            raise BusyError(f"Booking {booking_id} is being modified. Please retry shortly.")

        with store_errors("reading the updated booking"):
            return await self.bookings.get_booking(db, booking_id)

    async def _confirm_transition(
        self,
        db: AsyncSession,
        error: SQLAlchemyError,
        booking_id: int,
        target: BookingStatus,
    ) -> Booking:
        """Report success only if the new status is visible in the store."""
        logger.error(f"Store failure moving booking {booking_id} to {target.value}: {error}")
        with store_errors("verifying a failed status change"):
            booking = await self.bookings.get_booking(db, booking_id)
        if booking is not None and booking.status == target.value:
            logger.warning(f"Booking {booking_id} reached {target.value} despite a commit error")
            return booking
        raise UnavailableError("database", "status change could not be applied") from error


booking_service = BookingService()
