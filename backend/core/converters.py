from decimal import Decimal, ROUND_HALF_EVEN
from typing import Optional

from core.config import settings

QUANTITY_DECIMALS = 6


def to_decimal(value) -> Decimal:
    """Coerce None/int/float/str to Decimal (None -> 0)"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.2 from turning into 0.2000000000000000111
    return Decimal(str(value))


def round_cost(value: Decimal, decimals: Optional[int] = None) -> Decimal:
    places = settings.cost_decimals if decimals is None else decimals
    return to_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)


def round_quantity(value: Decimal) -> Decimal:
    """Quantize to the scale quantity columns are stored with"""
    return to_decimal(value).quantize(Decimal(1).scaleb(-QUANTITY_DECIMALS), rounding=ROUND_HALF_EVEN)


def unit_multiplier(value) -> Decimal:
    """Zero, negative and missing multipliers count as 1"""
    m = to_decimal(value)
    return m if m > 0 else Decimal("1")
