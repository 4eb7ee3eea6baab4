"""Booking state machine."""

from enum import Enum

from app.core.exceptions import IllegalTransitionError, InvalidInputError


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    UNPAID = "unpaid"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


INITIAL_STATUS = BookingStatus.UNPAID

# Statuses that hold the room against overlapping bookings
BLOCKING_STATUSES = frozenset(
    {BookingStatus.UNPAID, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN}
)

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.UNPAID: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Transitions a customer may apply to their own booking
CUSTOMER_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.UNPAID: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
}


def parse_status(value: str | BookingStatus) -> BookingStatus:
    """Coerce a raw status value, rejecting anything outside the lifecycle."""
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidInputError(f"Unknown booking status '{value}'")


def is_legal_transition(current: str | BookingStatus, target: str | BookingStatus) -> bool:
    return parse_status(target) in BOOKING_TRANSITIONS.get(parse_status(current), frozenset())


def is_customer_transition(current: str | BookingStatus, target: str | BookingStatus) -> bool:
    return parse_status(target) in CUSTOMER_TRANSITIONS.get(parse_status(current), frozenset())


def assert_booking_transition(current: str | BookingStatus, target: str | BookingStatus) -> None:
    if not is_legal_transition(current, target):
        raise IllegalTransitionError(parse_status(current).value, parse_status(target).value)
