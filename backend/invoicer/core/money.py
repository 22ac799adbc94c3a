"""Fixed-point money helpers.

Amounts are Decimals with two places. Editing input arrives as strings or
numbers and is coerced rather than rejected: anything missing, unparseable,
or too large to carry cents within the decimal context counts as zero.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Any

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def _fits_in_cents(value: Decimal) -> bool:
    # quantize to CENTS needs the integer digits plus two places within prec
    return value.adjusted() < getcontext().prec - 2


def to_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        # str() first so 0.1 stays 0.1 instead of its binary expansion
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return ZERO
    else:
        text = str(value).strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    if not result.is_finite() or not _fits_in_cents(result):
        return ZERO
    return result


def to_quantity(value: Any) -> int:
    return int(to_decimal(value))


def round2(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
