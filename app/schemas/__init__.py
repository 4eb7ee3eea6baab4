"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    AvailabilityResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingFilters,
    BookingListResponse,
    BookingResponse,
    BookingStatusChangeResponse,
    BookingStatusUpdate,
    ConflictingBooking,
    PriceQuoteResponse,
)
from app.schemas.room import RoomResponse, RoomTypeResponse

__all__ = [
    # Room
    "RoomTypeResponse",
    "RoomResponse",
    # Booking
    "BookingCreate",
    "BookingResponse",
    "BookingListResponse",
    "BookingFilters",
    "BookingStatusUpdate",
    "BookingCancelRequest",
    "BookingStatusChangeResponse",
    # Availability & pricing
    "ConflictingBooking",
    "AvailabilityResponse",
    "PriceQuoteResponse",
]
