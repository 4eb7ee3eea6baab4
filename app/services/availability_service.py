"""Room availability checks."""

from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.domain.pricing import validate_stay_dates
from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository, booking_repository
from app.repositories.room_repository import RoomRepository, room_repository


@dataclass
class AvailabilityResult:
    """Outcome of an availability check."""

    room_id: int
    check_in: date
    check_out: date
    conflicts: list[Booking] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return not self.conflicts

    @property
    def conflicting_ids(self) -> list[int]:
        return [b.id for b in self.conflicts]


class AvailabilityService:
    """Detects blocking bookings that overlap a requested stay."""

    def __init__(
        self,
        bookings: BookingRepository = booking_repository,
        rooms: RoomRepository = room_repository,
    ):
        self.bookings = bookings
        self.rooms = rooms

    async def find_conflicts(
        self,
        db: AsyncSession,
        room_id: int,
        check_in: date,
        check_out: date,
    ) -> AvailabilityResult:
        """Conflicts for a room already known to exist.

        Used inside the create path, where the room is loaded (and locked) by
        the caller within the same transaction.
        """
        conflicts = await self.bookings.find_blocking_bookings(db, room_id, check_in, check_out)
        return AvailabilityResult(
            room_id=room_id, check_in=check_in, check_out=check_out, conflicts=conflicts
        )

    async def check_availability(
        self,
        db: AsyncSession,
        room_id: int,
        check_in: date,
        check_out: date,
    ) -> AvailabilityResult:
        """Check whether the room is free for [check_in, check_out).

        Read-only.

        Raises:
            InvalidInputError: check_in is not before check_out
            NotFoundError: unknown room
        """
        validate_stay_dates(check_in, check_out)
        room = await self.rooms.get_room(db, room_id)
        if room is None:
            raise NotFoundError("Room", str(room_id))
        return await self.find_conflicts(db, room_id, check_in, check_out)


availability_service = AvailabilityService()
