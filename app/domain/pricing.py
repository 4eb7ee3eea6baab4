"""Stay pricing.

Prices are ``Decimal`` amounts in the hotel currency, quantized to cents.
A stay covers the half-open range [check_in, check_out), so the night count
is the whole-day difference between the two dates.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from app.core.exceptions import InvalidInputError

CENTS = Decimal("0.01")


def validate_stay_dates(check_in: date, check_out: date) -> None:
    """Reject empty or inverted stays."""
    if check_in >= check_out:
        raise InvalidInputError(
            f"check_out ({check_out.isoformat()}) must be after check_in ({check_in.isoformat()})"
        )


def count_nights(check_in: date, check_out: date) -> int:
    """Number of nights between two dates.

    Raises:
        InvalidInputError: if the stay has zero or negative nights
    """
    validate_stay_dates(check_in, check_out)
    return (check_out - check_in).days


def to_money(amount: Decimal | int | str) -> Decimal:
    """Quantize an amount to cents."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_total(nightly_rate: Decimal, nights: int) -> Decimal:
    """Total price for ``nights`` at ``nightly_rate``."""
    if nights <= 0:
        raise InvalidInputError(f"A stay must be at least one night, got {nights}")
    if nightly_rate < 0:
        raise InvalidInputError("Nightly rate cannot be negative")
    return to_money(to_money(nightly_rate) * nights)
