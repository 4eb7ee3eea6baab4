"""Admin booking override endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.api.v1.bookings import booking_filters
from app.core.permissions import Principal
from app.models.booking import Booking
from app.schemas.booking import (
    BookingCancelRequest,
    BookingFilters,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from app.services.admin_booking_service import admin_booking_service

router = APIRouter()


# ============ BOOKING MANAGEMENT ============


@router.get("/bookings", response_model=BookingListResponse)
async def list_all_bookings(
    admin: Annotated[Principal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Annotated[BookingFilters, Depends(booking_filters)],
) -> BookingListResponse:
    """List bookings across all users."""
    bookings, total = await admin_booking_service.list_all_bookings(db, admin, filters)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=filters.page,
        page_size=filters.page_size,
    )


@router.put("/bookings/{booking_id}", response_model=BookingResponse)
async def set_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    admin: Annotated[Principal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Move any booking to a legal next status."""
    return await admin_booking_service.set_status(
        db, booking_id, admin, update.status, reason=update.reason
    )


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def force_cancel_booking(
    booking_id: int,
    admin: Annotated[Principal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    cancel_request: BookingCancelRequest | None = None,
) -> Booking:
    """Cancel any unpaid or confirmed booking."""
    reason = cancel_request.reason if cancel_request else None
    return await admin_booking_service.force_cancel(db, booking_id, admin, reason=reason)


@router.post("/bookings/{booking_id}/check-in", response_model=BookingResponse)
async def check_in_booking(
    booking_id: int,
    admin: Annotated[Principal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Check a confirmed guest in."""
    return await admin_booking_service.check_in(db, booking_id, admin)


@router.post("/bookings/{booking_id}/check-out", response_model=BookingResponse)
async def check_out_booking(
    booking_id: int,
    admin: Annotated[Principal, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Check a guest out."""
    return await admin_booking_service.check_out(db, booking_id, admin)
