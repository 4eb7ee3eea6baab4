"""Booking-related Pydantic schemas.

Request schemas only parse types; booking rules (date order, guest counts,
occupancy) are enforced by the booking services so every caller gets the
same ``invalid_input`` error.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.booking_state import BookingStatus


class BookingBase(BaseModel):
    """Base booking schema."""

    room_id: int
    check_in: date
    check_out: date
    guests: int = 1
    special_requests: str | None = None


class BookingCreate(BookingBase):
    """Schema for creating a booking."""


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    room_id: int
    user_id: int

    # Dates
    check_in: date
    check_out: date
    nights: int
    guests: int

    # Pricing
    nightly_rate: Decimal
    total_price: Decimal
    currency: str

    special_requests: str | None

    # Status
    status: BookingStatus
    cancellation_reason: str | None

    # Timestamps
    confirmed_at: datetime | None
    checked_in_at: datetime | None
    checked_out_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingFilters(BaseModel):
    """Filters for listing bookings.

    ``from_date``/``to_date`` select bookings whose stay overlaps that window.
    ``user_id`` is honoured for admins only.
    """

    status: BookingStatus | None = None
    room_id: int | None = None
    user_id: int | None = None
    from_date: date | None = None
    to_date: date | None = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class BookingStatusUpdate(BaseModel):
    """Schema for requesting a status change."""

    status: BookingStatus
    reason: str | None = Field(None, max_length=1000)


class BookingCancelRequest(BaseModel):
    """Schema for canceling a booking."""

    reason: str | None = Field(None, max_length=1000)


class BookingStatusChangeResponse(BaseModel):
    """Schema for a booking history entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_id: int
    from_status: BookingStatus | None
    to_status: BookingStatus
    actor_id: int
    actor_role: str
    forced: bool
    reason: str | None
    created_at: datetime | None


class ConflictingBooking(BaseModel):
    """A blocking booking that overlaps a requested stay."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    check_in: date
    check_out: date
    status: BookingStatus


class AvailabilityResponse(BaseModel):
    """Schema for availability check response."""

    room_id: int
    check_in: date
    check_out: date
    available: bool
    conflicts: list[ConflictingBooking]


class PriceQuoteResponse(BaseModel):
    """Schema for stay price quote."""

    room_id: int
    check_in: date
    check_out: date
    nightly_rate: Decimal
    nights: int
    total_price: Decimal
    currency: str
