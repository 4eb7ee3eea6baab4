"""Stay pricing service."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import NotFoundError
from app.domain.pricing import calculate_total, count_nights
from app.models.room import Room
from app.repositories.room_repository import RoomRepository, room_repository


@dataclass(frozen=True)
class PriceQuote:
    """Price of a stay in one room."""

    room_id: int
    check_in: date
    check_out: date
    nightly_rate: Decimal
    nights: int
    total_price: Decimal
    currency: str


class PricingService:
    """Computes stay prices from the room catalog."""

    def __init__(self, rooms: RoomRepository = room_repository):
        self.rooms = rooms

    def quote_for_room(self, room: Room, check_in: date, check_out: date) -> PriceQuote:
        """Price a stay for an already loaded room. No I/O."""
        nights = count_nights(check_in, check_out)
        room_type = room.room_type
        if room_type is None or room_type.base_price is None:
            raise NotFoundError("Rate for room", str(room.id))

        return PriceQuote(
            room_id=room.id,
            check_in=check_in,
            check_out=check_out,
            nightly_rate=room_type.base_price,
            nights=nights,
            total_price=calculate_total(room_type.base_price, nights),
            currency=settings.currency,
        )

    async def compute_price(
        self,
        db: AsyncSession,
        room_id: int,
        check_in: date,
        check_out: date,
    ) -> PriceQuote:
        """Price a stay.

        Raises:
            InvalidInputError: check_in is not before check_out
            NotFoundError: unknown room or missing rate
        """
        count_nights(check_in, check_out)
        room = await self.rooms.get_room(db, room_id)
        if room is None:
            raise NotFoundError("Room", str(room_id))
        return self.quote_for_room(room, check_in, check_out)


pricing_service = PricingService()
