"""Aggregation of field norms and norm fillings to farm level."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from nutrient_engine.models.enums import NormType
from nutrient_engine.models.results import NormFilling
from nutrient_engine.numeric import ZERO, round_decimal, to_decimal


class FieldNorms(BaseModel):
    """Usage norms (kg/ha) of a single field."""

    model_config = ConfigDict(frozen=True)

    b_id: str = Field(description="Field identifier")
    b_area: Decimal = Field(ge=0, description="Field area (ha)")
    norms: dict[NormType, Decimal] = Field(description="Norm value (kg/ha) per norm type")


class FieldNormFillings(BaseModel):
    """Norm fillings (kg/ha) of a single field."""

    model_config = ConfigDict(frozen=True)

    b_id: str = Field(description="Field identifier")
    b_area: Decimal = Field(ge=0, description="Field area (ha)")
    fillings: dict[NormType, NormFilling] = Field(description="Filling per norm type")


def _sum_over_fields(values: list[tuple[Decimal, Decimal]]) -> Decimal:
    total = ZERO
    for value, area in values:
        total += to_decimal(value) * to_decimal(area)
    return round_decimal(total, 0)


def aggregate_norms_to_farm_level(fields: list[FieldNorms]) -> dict[NormType, Decimal]:
    """Total norm space of the farm in kg.

    Formula (per norm type):
        farm_norm = round(sum(norm * b_area), 0)

    A norm type missing on a field counts as 0 for that field.
    """
    return {
        norm_type: _sum_over_fields(
            [(field.norms.get(norm_type, ZERO), field.b_area) for field in fields]
        )
        for norm_type in NormType
    }


def aggregate_norm_fillings_to_farm_level(
    fields: list[FieldNormFillings],
) -> dict[NormType, Decimal]:
    """Total norm filling of the farm in kg.

    Formula (per norm type):
        farm_filling = round(sum(norm_filling * b_area), 0)
    """
    totals = {}
    for norm_type in NormType:
        values = []
        for field in fields:
            filling = field.fillings.get(norm_type)
            values.append((filling.norm_filling if filling else ZERO, field.b_area))
        totals[norm_type] = _sum_over_fields(values)
    return totals
