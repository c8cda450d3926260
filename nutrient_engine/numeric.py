"""Decimal helpers and the numeric output boundary.

All calculators work on ``decimal.Decimal`` so that regulatory sums do not
drift through binary floating point. Values become plain Python numbers only
when a finished result leaves the engine via ``to_numeric``.
"""

from collections.abc import Mapping, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

ZERO = Decimal(0)
ONE = Decimal(1)


def to_decimal(value: Decimal | int | float | str | None, default: Decimal = ZERO) -> Decimal:
    """Convert a raw input value to Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.

    Args:
        value: Number, numeric string or None
        default: Returned when value is None

    Returns:
        Decimal representation of value
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Clamp value into the closed interval [lower, upper]."""
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value


def decimal_sum(values: Sequence[Decimal] | Any) -> Decimal:
    """Sum Decimals starting from an exact zero."""
    total = ZERO
    for value in values:
        total += value
    return total


def round_decimal(value: Decimal, places: int = 0) -> Decimal:
    """Round half away from zero to the given number of decimal places."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def to_numeric(data: Any, places: int = 0) -> Any:
    """Convert a result tree to plain numbers.

    Walks pydantic models, mappings and sequences. Every Decimal is rounded
    (half away from zero) and returned as ``int`` when ``places`` is 0,
    otherwise as ``float``. Dates are rendered as ISO strings and enums as
    their values; other leaves are returned unchanged.

    Args:
        data: Result model, dict, list or scalar
        places: Decimal places kept for each number

    Returns:
        The same structure built from dicts, lists and plain numbers
    """
    if isinstance(data, Decimal):
        rounded = round_decimal(data, places)
        if places == 0:
            return int(rounded)
        return float(rounded)
    if isinstance(data, BaseModel):
        return {name: to_numeric(getattr(data, name), places) for name in type(data).model_fields}
    if isinstance(data, date):
        return data.isoformat()
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, Mapping):
        return {to_numeric(key, places): to_numeric(value, places) for key, value in data.items()}
    if isinstance(data, list | tuple):
        return [to_numeric(item, places) for item in data]
    return data
