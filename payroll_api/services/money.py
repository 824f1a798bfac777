# payroll_api/services/money.py
"""
Centralised money helpers. Every currency amount the engine produces goes
through ``q2`` so rounding is ROUND_HALF_UP to 2 decimal places everywhere.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from payroll_api.common.errors import ValidationError

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
UNIT = Decimal("1")
FRACTION = Decimal("0.000001")
HUNDRED = Decimal("100")


def dec(x, field: str = "value") -> Decimal:
    """Coerce ints, floats, strings and Decimals to a finite Decimal (floats via str)."""
    if isinstance(x, Decimal):
        d = x
    elif x is None or x == "" or isinstance(x, bool):
        raise ValidationError(f"{field} must be a number")
    else:
        try:
            d = Decimal(str(x).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field} must be a number, got {x!r}")
    # NaN and Infinity are not amounts
    if not d.is_finite():
        raise ValidationError(f"{field} must be a finite number, got {x!r}")
    return d


def q2(x) -> Decimal:
    return dec(x).quantize(CENT, rounding=ROUND_HALF_UP)


def q0(x) -> Decimal:
    return dec(x).quantize(UNIT, rounding=ROUND_HALF_UP)


def qfrac(x) -> Decimal:
    return dec(x).quantize(FRACTION, rounding=ROUND_HALF_UP)


def percent_of(base, pct) -> Decimal:
    return q2(dec(base) * dec(pct) / HUNDRED)
