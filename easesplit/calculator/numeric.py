"""
Safe Numeric Coercion

Item fields arrive from manual entry and from OCR. While a user is mid-edit
they can hold anything: None, a half-typed string, NaN. Arithmetic must
never see those values.

FALLBACK TABLE:
    price        -> 0
    quantity     -> 1
    tax_percent  -> 0

Accepted as numbers: int, float and Decimal values that are finite.
Everything else (bool, str, None, NaN, +/-Infinity) maps to the fallback.
"""

import math
from decimal import Decimal
from typing import Any, Final

PRICE_FALLBACK: Final[Decimal] = Decimal("0")
QUANTITY_FALLBACK: Final[Decimal] = Decimal("1")
TAX_PERCENT_FALLBACK: Final[Decimal] = Decimal("0")


def to_safe_number(value: Any, fallback: Decimal = Decimal("0")) -> Decimal:
    """
    Coerce a possibly-invalid numeric field to a finite Decimal.

    Floats go through str() so 2.5 becomes Decimal("2.5"), not the
    binary expansion.

    Examples:
        >>> to_safe_number(3)
        Decimal('3')
        >>> to_safe_number(float("nan"), Decimal("1"))
        Decimal('1')
        >>> to_safe_number("12.00")
        Decimal('0')
    """
    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool):
        return fallback

    if isinstance(value, Decimal):
        return value if value.is_finite() else fallback

    if isinstance(value, int):
        return Decimal(value)

    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else fallback

    return fallback
