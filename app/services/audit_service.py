"""Booking status audit trail service."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Principal
from app.domain.booking_state import BookingStatus
from app.models.booking import BookingStatusChange
from app.repositories.booking_repository import BookingRepository, booking_repository

logger = logging.getLogger(__name__)


class AuditService:
    """Records every booking status change (append-only)."""

    def __init__(self, repository: BookingRepository = booking_repository):
        self.repository = repository

    async def log_status_change(
        self,
        db: AsyncSession,
        booking_id: int,
        from_status: BookingStatus | None,
        to_status: BookingStatus,
        principal: Principal,
        forced: bool = False,
        reason: str | None = None,
    ) -> BookingStatusChange:
        """Log a booking status change.

        Args:
            db: Database session (the change commits with the caller's unit)
            booking_id: Booking ID
            from_status: Previous status, None on creation
            to_status: New status
            principal: Caller who made the change
            forced: True for admin overrides
            reason: Optional free-text reason

        Returns:
            Created history entry
        """
        change = await self.repository.add_status_change(
            db,
            booking_id=booking_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=principal.user_id,
            actor_role=principal.role.value,
            forced=forced,
            reason=reason,
        )
        logger.info(
            f"Booking {booking_id}: {from_status.value if from_status else '-'} → {to_status.value} "
            f"by {principal.role.value} {principal.user_id}{' (forced)' if forced else ''}"
        )
        return change


audit_service = AuditService()
