"""Core utilities: errors, identity, permissions and locking."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BusyError,
    ConflictError,
    ForbiddenError,
    IllegalTransitionError,
    InvalidInputError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from app.core.permissions import Principal, UserRole

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BusyError",
    "ConflictError",
    "ForbiddenError",
    "IllegalTransitionError",
    "InvalidInputError",
    "NotFoundError",
    "UnavailableError",
    "ValidationError",
    "Principal",
    "UserRole",
]
