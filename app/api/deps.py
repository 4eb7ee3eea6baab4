"""API dependencies for authentication and common operations."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError
from app.core.permissions import Principal, require_admin
from app.core.security import principal_from_token
from app.database import get_db

__all__ = ["get_db", "get_current_principal", "get_current_admin"]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal:
    """Get the acting principal from the bearer token."""
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    return principal_from_token(credentials.credentials)


async def get_current_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Get the current principal and verify they are an admin."""
    require_admin(principal)
    return principal
