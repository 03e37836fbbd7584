"""Decimal rounding conventions for money and hours.

Rounding:
- USD to 2 decimals at persistence and display
- Hours kept at 4 decimals
- Internal compute never goes through float
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

PRECISION = Decimal("0.0001")
OUTPUT_PRECISION = Decimal("0.01")
ZERO = Decimal("0")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)


def round_precise(amount: Decimal) -> Decimal:
    """Round amount to 4 decimal places."""
    return amount.quantize(PRECISION, rounding=ROUND_HALF_UP)


def to_decimal(value: object) -> Decimal | None:
    """Coerce a number or numeric string to a finite Decimal.

    Floats go through ``str`` so ``5.25`` stays ``Decimal("5.25")``.
    Booleans, NaN and infinities are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result
