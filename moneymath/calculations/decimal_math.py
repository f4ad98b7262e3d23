"""
Decimal Arithmetic Utilities

Exact-decimal helpers shared by every calculation engine.

Intermediate values are carried at SCALE (10) fractional digits and only
rounded to DISPLAY_SCALE (2) when a result is handed back to the caller,
so schedules with hundreds of rows do not accumulate rounding drift.
"""

from decimal import Decimal, Context, ROUND_HALF_UP
from typing import Optional, Union

SCALE = 10
DISPLAY_SCALE = 2
ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")
ONE = Decimal("1")
TWELVE = Decimal("12")
HUNDRED = Decimal("100")

# Balances below one currency unit are treated as fully paid / exhausted
EPSILON = Decimal("1")

_CONTEXT = Context(prec=50, rounding=ROUNDING)
_SCALE_EXPONENTS = {}

Number = Union[Decimal, int, float, str]


def to_decimal(value: Optional[Number], default: Decimal = ZERO) -> Decimal:
    """
    Coerce a caller-supplied number to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. None maps to ``default``.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize(value: Decimal, places: int = SCALE) -> Decimal:
    """Round to a fixed number of fractional digits (half-up)."""
    exponent = _SCALE_EXPONENTS.get(places)
    if exponent is None:
        exponent = Decimal(1).scaleb(-places)
        _SCALE_EXPONENTS[places] = exponent
    return value.quantize(exponent, rounding=ROUNDING, context=_CONTEXT)


def power(base: Number, exponent: int) -> Decimal:
    """
    Calculate base ** exponent for an integer exponent.

    Used in: compound interest, annuity and EMI formulas.
    Example: power(Decimal("1.01"), 12) -> 1.1268250301

    Args:
        base: The base number (usually 1 + rate)
        exponent: Integer power; negative values return the reciprocal

    Returns:
        Result at SCALE fractional digits; exponent 0 always yields 1
    """
    if exponent == 0:
        return ONE

    base = to_decimal(base)
    if exponent < 0:
        return safe_divide(ONE, power(base, -exponent))

    return quantize(_CONTEXT.power(base, exponent))


def percent_to_fraction(percent: Optional[Number]) -> Decimal:
    """
    Convert a percentage to a fraction.

    Example: percent_to_fraction(12) -> 0.12
    """
    if percent is None:
        return ZERO
    return quantize(_CONTEXT.divide(to_decimal(percent), HUNDRED))


def monthly_rate(annual_rate_percent: Optional[Number]) -> Decimal:
    """Per-month fraction for an annual percentage (12 -> 0.01)."""
    return quantize(_CONTEXT.divide(percent_to_fraction(annual_rate_percent), TWELVE))


def safe_divide(numerator: Optional[Number], denominator: Optional[Number]) -> Decimal:
    """
    Divide, returning zero instead of failing.

    A missing operand or a zero denominator yields Decimal 0.
    """
    if numerator is None or denominator is None:
        return ZERO
    denominator = to_decimal(denominator)
    if denominator == 0:
        return ZERO
    return quantize(_CONTEXT.divide(to_decimal(numerator), denominator))


def round2(value: Optional[Number]) -> Decimal:
    """Round to 2 fractional digits for display (None -> 0.00)."""
    if value is None:
        return quantize(ZERO, DISPLAY_SCALE)
    return quantize(to_decimal(value), DISPLAY_SCALE)


def is_positive(value: Optional[Number]) -> bool:
    return value is not None and to_decimal(value) > 0


def is_non_negative(value: Optional[Number]) -> bool:
    return value is not None and to_decimal(value) >= 0


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Constrain value to the closed band [lower, upper]."""
    return max(lower, min(value, upper))


def percent_of(part: Number, whole: Number) -> Decimal:
    """part as a percentage of whole (0 when whole is 0)."""
    return safe_divide(to_decimal(part) * HUNDRED, whole)
