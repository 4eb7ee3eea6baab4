"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception.

    ``code`` is a stable machine-readable identifier and ``extra`` carries
    structured context that the exception handler merges into the response body.
    """

    code: str = "error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.extra = extra or {}
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_dict(self) -> dict[str, Any]:
        """Structured error payload."""
        return {"detail": self.detail, "code": self.code, **self.extra}


class ValidationError(AppException):
    """Validation error exception."""

    code = "validation_error"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class InvalidInputError(ValidationError):
    """Malformed dates, non-positive guest counts, zero-night stays."""

    code = "invalid_input"


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    code = "unauthenticated"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    code = "forbidden"

    def __init__(
        self,
        detail: str = "You don't have permission to access this resource",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail, extra=extra)


class ForbiddenError(AuthorizationError):
    """The principal's role does not allow this operation on this booking."""

    def __init__(self, role: str, detail: str | None = None) -> None:
        self.role = role
        super().__init__(
            detail=detail or f"Role '{role}' is not allowed to perform this action",
            extra={"role": role},
        )


class ConflictError(AppException):
    """Requested dates overlap existing bookings for the room."""

    code = "conflict"

    def __init__(
        self,
        conflicting_booking_ids: list[int],
        detail: str = "The selected dates are not available",
    ) -> None:
        self.conflicting_booking_ids = conflicting_booking_ids
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            extra={"conflicting_booking_ids": conflicting_booking_ids},
        )


class IllegalTransitionError(AppException):
    """Requested status is not a legal successor of the current status."""

    code = "illegal_transition"

    def __init__(self, current_status: str, requested_status: str) -> None:
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invalid booking transition: {current_status} → {requested_status}",
            extra={"current_status": current_status, "requested_status": requested_status},
        )


class BusyError(AppException):
    """Lock or write contention; safe to retry with backoff."""

    code = "busy"

    def __init__(
        self,
        detail: str = "The resource is busy. Please retry shortly.",
        retry_after: int = 1,
    ) -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            headers={"Retry-After": str(retry_after)},
            extra={"retryable": True},
        )


class UnavailableError(AppException):
    """Store or infrastructure failure."""

    code = "unavailable"

    def __init__(self, service: str = "database", detail: str | None = None) -> None:
        message = f"Service '{service}' is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)
