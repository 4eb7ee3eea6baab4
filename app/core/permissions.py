"""Roles, principals and booking capabilities."""

from dataclasses import dataclass
from enum import Enum

from app.core.exceptions import ForbiddenError


class UserRole(str, Enum):
    """Roles issued by the identity service."""

    CUSTOMER = "customer"
    ADMIN = "admin"


class Permission(str, Enum):
    """Booking capabilities."""

    CREATE_BOOKING = "create_booking"
    VIEW_OWN_BOOKINGS = "view_own_bookings"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    CONFIRM_OWN_BOOKING = "confirm_own_booking"
    CANCEL_OWN_BOOKING = "cancel_own_booking"
    MANAGE_ANY_BOOKING = "manage_any_booking"
    FRONT_DESK = "front_desk"  # check-in / check-out


ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.CUSTOMER: {
        Permission.CREATE_BOOKING,
        Permission.VIEW_OWN_BOOKINGS,
        Permission.CONFIRM_OWN_BOOKING,
        Permission.CANCEL_OWN_BOOKING,
    },
    UserRole.ADMIN: {perm for perm in Permission},
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of an operation."""

    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)


def has_permission(role: UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(role, set())


def require_permission(principal: Principal, permission: Permission) -> None:
    """Raise ForbiddenError unless the principal holds ``permission``."""
    if not principal.can(permission):
        raise ForbiddenError(
            principal.role.value,
            f"Permission '{permission.value}' is required for this action",
        )


def require_admin(principal: Principal) -> None:
    """Raise ForbiddenError unless the principal is an admin."""
    if not principal.is_admin:
        raise ForbiddenError(principal.role.value, "Admin access required")
