"""Money helpers."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round2(value: Decimal | int | float) -> Decimal:
    """Round a monetary value half-up to 2 decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce an untrusted value into a Decimal, returning default when it can't be.

    Booleans, NaN and infinities are treated as malformed.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result
