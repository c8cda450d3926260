"""Atmospheric nitrogen deposition for a batch of fields.

Yearly deposition rates (kg N/ha/year) come from an injected source that
answers for all fields in one call, so that expensive lookups such as
raster downloads happen once per calculation. The rates are prorated to the
days each field is active within the time frame.
"""

import logging
import math
from decimal import Decimal
from typing import Protocol

from nutrient_engine.config import CONSTANTS
from nutrient_engine.models.domain import FieldDetails, TimeFrame
from nutrient_engine.models.results import NitrogenSupplyDeposition
from nutrient_engine.numeric import ONE, ZERO, to_decimal

logger = logging.getLogger(__name__)


class DepositionSource(Protocol):
    """Provider of yearly nitrogen deposition rates."""

    def fetch_deposition_batch(
        self, fields: list[FieldDetails], time_frame: TimeFrame
    ) -> dict[str, Decimal | float | None]:
        """Return the yearly deposition rate (kg N/ha) per field id.

        Fields without a known location may be left out or mapped to None.
        """
        ...


class StaticDepositionSource:
    """Deposition source backed by a fixed mapping of field id to yearly rate.

    Args:
        rates: Yearly deposition (kg N/ha) per field id
        default: Rate used for fields not in ``rates``; None leaves them out
    """

    def __init__(
        self,
        rates: dict[str, Decimal | float | None] | None = None,
        default: Decimal | float | None = None,
    ):
        self.rates = dict(rates or {})
        self.default = default

    def fetch_deposition_batch(
        self, fields: list[FieldDetails], time_frame: TimeFrame
    ) -> dict[str, Decimal | float | None]:
        result = {}
        for field in fields:
            if field.b_id in self.rates:
                result[field.b_id] = self.rates[field.b_id]
            elif self.default is not None:
                result[field.b_id] = self.default
        return result


def _active_fraction(field: FieldDetails, time_frame: TimeFrame) -> Decimal:
    """Fraction of a year the field is active within the time frame."""
    start = max(field.b_start, time_frame.start) if field.b_start else time_frame.start
    end = min(field.b_end, time_frame.end) if field.b_end else time_frame.end
    days = (end - start).days
    if days < 0:
        return ZERO
    return (Decimal(days) + ONE) / CONSTANTS.DAYS_PER_YEAR


def _is_finite(value: Decimal | float | None) -> bool:
    if value is None:
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def calculate_deposition_by_field(
    fields: list[FieldDetails],
    time_frame: TimeFrame,
    source: DepositionSource,
) -> dict[str, NitrogenSupplyDeposition]:
    """Calculate nitrogen deposition for all fields with a single source call.

    Formula:
        deposition = yearly_rate * (days + 1) / 365

    where days is the calendar-day span of the field's active interval
    within the time frame; a field not active in the frame gets 0. Missing
    or non-finite rates count as 0.

    Args:
        fields: Fields of the farm
        time_frame: Farm evaluation window
        source: Provider of yearly deposition rates

    Returns:
        Deposition per field id. Fields the source did not answer for are
        absent, so the caller can report them as failed.
    """
    if not fields:
        return {}

    rates = source.fetch_deposition_batch(fields, time_frame)

    deposition = {}
    for field in fields:
        if field.b_id not in rates:
            logger.warning(f"No deposition rate returned for field {field.b_id}")
            continue
        rate = rates[field.b_id]
        total = ZERO
        if _is_finite(rate):
            total = to_decimal(rate) * _active_fraction(field, time_frame)
        deposition[field.b_id] = NitrogenSupplyDeposition(total=total)

    return deposition
