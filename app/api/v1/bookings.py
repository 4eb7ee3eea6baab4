"""Booking endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_principal, get_db
from app.core.permissions import Principal
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking, BookingStatusChange
from app.schemas.booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingFilters,
    BookingListResponse,
    BookingResponse,
    BookingStatusChangeResponse,
    BookingStatusUpdate,
)
from app.services.booking_service import booking_service

router = APIRouter()


def booking_filters(
    status: BookingStatus | None = None,
    room_id: int | None = None,
    user_id: int | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> BookingFilters:
    """Query parameters for booking lists."""
    return BookingFilters(
        status=status,
        room_id=room_id,
        user_id=user_id,
        from_date=from_date,
        to_date=to_date,
        page=page,
        page_size=page_size,
    )


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Create a new booking in status unpaid."""
    return await booking_service.create_booking(
        db,
        principal,
        room_id=booking_data.room_id,
        check_in=booking_data.check_in,
        check_out=booking_data.check_out,
        guests=booking_data.guests,
        special_requests=booking_data.special_requests,
    )


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
    filters: Annotated[BookingFilters, Depends(booking_filters)],
) -> BookingListResponse:
    """List the caller's bookings, newest first."""
    bookings, total = await booking_service.list_bookings(db, principal, filters)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=filters.page,
        page_size=filters.page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get booking details."""
    return await booking_service.get_booking(db, booking_id, principal)


@router.get("/{booking_id}/history", response_model=list[BookingStatusChangeResponse])
async def get_booking_history(
    booking_id: int,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[BookingStatusChange]:
    """Get the status history of a booking, oldest first."""
    return await booking_service.get_status_history(db, booking_id, principal)


@router.post("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Move a booking to a new status."""
    return await booking_service.transition_status(
        db, booking_id, update.status, principal, reason=update.reason
    )


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: int,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Confirm an unpaid booking once payment is settled."""
    return await booking_service.transition_status(
        db, booking_id, BookingStatus.CONFIRMED, principal
    )


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
    cancel_request: BookingCancelRequest | None = None,
) -> Booking:
    """Cancel a booking and free its dates."""
    reason = cancel_request.reason if cancel_request else None
    return await booking_service.transition_status(
        db, booking_id, BookingStatus.CANCELLED, principal, reason=reason
    )
