"""Bearer token handling.

Tokens are issued by the identity service. This module only verifies them
and turns their claims into a :class:`Principal`; ``create_access_token`` is
kept for local tooling and tests that need to mint a token with the shared
secret.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import AuthenticationError
from app.core.permissions import Principal, UserRole


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")
    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def principal_from_token(token: str) -> Principal:
    """Decode a bearer token into the acting principal."""
    payload = verify_token(token, token_type="access")

    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationError("Invalid token payload")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token subject")

    try:
        role = UserRole(payload.get("role", UserRole.CUSTOMER.value))
    except ValueError:
        raise AuthenticationError(f"Unknown role '{payload.get('role')}'")

    return Principal(user_id=user_id, role=role)
