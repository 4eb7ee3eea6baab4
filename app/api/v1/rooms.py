"""Room catalog, availability and pricing endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.core.exceptions import NotFoundError
from app.database import store_errors
from app.models.room import Room
from app.repositories.room_repository import room_repository
from app.schemas.booking import AvailabilityResponse, ConflictingBooking, PriceQuoteResponse
from app.schemas.room import RoomResponse
from app.services.booking_service import booking_service

router = APIRouter()


@router.get("/", response_model=list[RoomResponse])
async def list_rooms(
    db: Annotated[AsyncSession, Depends(get_db)],
    status: str = Query("available", description="available, maintenance or out_of_service"),
) -> list[Room]:
    """List bookable rooms by default, or the rooms in another catalog status."""
    with store_errors("listing rooms"):
        return await room_repository.list_rooms(db, status=status)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Get a room."""
    with store_errors("reading a room"):
        room = await room_repository.get_room(db, room_id)
    if room is None:
        raise NotFoundError("Room", str(room_id))
    return room


@router.get("/{room_id}/availability", response_model=AvailabilityResponse)
async def check_room_availability(
    room_id: int,
    check_in: date,
    check_out: date,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AvailabilityResponse:
    """Check whether a room is free for [check_in, check_out)."""
    result = await booking_service.check_availability(db, room_id, check_in, check_out)
    return AvailabilityResponse(
        room_id=result.room_id,
        check_in=result.check_in,
        check_out=result.check_out,
        available=result.available,
        conflicts=[ConflictingBooking.model_validate(b) for b in result.conflicts],
    )


@router.get("/{room_id}/quote", response_model=PriceQuoteResponse)
async def quote_stay(
    room_id: int,
    check_in: date,
    check_out: date,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PriceQuoteResponse:
    """Price a stay without booking it."""
    quote = await booking_service.compute_price(db, room_id, check_in, check_out)
    return PriceQuoteResponse(
        room_id=quote.room_id,
        check_in=quote.check_in,
        check_out=quote.check_out,
        nightly_rate=quote.nightly_rate,
        nights=quote.nights,
        total_price=quote.total_price,
        currency=quote.currency,
    )
