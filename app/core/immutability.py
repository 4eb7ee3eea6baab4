"""Append-only enforcement for booking history using SQLAlchemy events."""

import logging
from datetime import UTC, datetime

from sqlalchemy import event

from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_registered = False


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify an append-only record."""

    code = "immutable_record"

    def __init__(self, model_name: str, operation: str, record_id: str):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        super().__init__(
            f"Immutability violation: Cannot {operation} {model_name} record {record_id}. "
            "Booking history is append-only."
        )


def _log_immutability_violation(model_name: str, operation: str, record_id: str) -> None:
    """Log immutability violation for audit purposes."""
    logger.error(
        f"IMMUTABILITY_VIOLATION: Attempted to {operation} {model_name} "
        f"record_id={record_id} at {datetime.now(UTC).isoformat()}"
    )


def register_immutability_enforcement() -> None:
    """Register SQLAlchemy event listeners for append-only models.

    Safe to call more than once; listeners are only attached the first time.
    """
    global _registered
    if _registered:
        return

    from app.models.booking import BookingStatusChange

    @event.listens_for(BookingStatusChange, "before_update")
    def prevent_status_change_update(mapper, connection, target):
        _log_immutability_violation("BookingStatusChange", "UPDATE", str(target.id))
        raise ImmutabilityViolationError("BookingStatusChange", "UPDATE", str(target.id))

    @event.listens_for(BookingStatusChange, "before_delete")
    def prevent_status_change_delete(mapper, connection, target):
        _log_immutability_violation("BookingStatusChange", "DELETE", str(target.id))
        raise ImmutabilityViolationError("BookingStatusChange", "DELETE", str(target.id))

    _registered = True
    logger.info("Immutability enforcement registered for booking history")
