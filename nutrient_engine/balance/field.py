"""Nitrogen balance of a single field.

A field is evaluated in a fixed order: soil analyses are combined first,
then supply, removal and emission are calculated, and finally the target.
The field-local time frame is the intersection of the farm time frame with
the field's active interval.

Calculation errors are confined to the field: they are logged and turned
into a failure result so that the other fields of the farm still complete.
Structural reference data errors propagate.
"""

import logging
from dataclasses import dataclass

from nutrient_engine.calculators import (
    calculate_nitrogen_emission,
    calculate_nitrogen_removal,
    calculate_nitrogen_supply,
    calculate_target_for_nitrogen_balance,
    combine_soil_analyses,
)
from nutrient_engine.errors import CalculationError, StructuralDataError, strip_error_prefixes
from nutrient_engine.models.domain import (
    CultivationDetail,
    FertilizerDetail,
    FieldInput,
    NitrogenBalanceInput,
    TimeFrame,
)
from nutrient_engine.models.results import (
    FieldBalanceFailure,
    FieldBalanceResult,
    FieldBalanceSuccess,
    NitrogenBalanceField,
    NitrogenSupplyDeposition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceContext:
    """Farm-wide lookups shared by every field of a calculation.

    Attributes:
        fertilizer_details: Fertilizer catalogue indexed by p_id_catalogue
        cultivation_details: Crop catalogue indexed by b_lu_catalogue
        time_frame: Farm evaluation window
    """

    fertilizer_details: dict[str, FertilizerDetail]
    cultivation_details: dict[str, CultivationDetail]
    time_frame: TimeFrame

    @classmethod
    def from_input(cls, balance_input: NitrogenBalanceInput) -> "BalanceContext":
        """Index the catalogues of a balance input once."""
        return cls(
            fertilizer_details={d.p_id_catalogue: d for d in balance_input.fertilizer_details},
            cultivation_details={d.b_lu_catalogue: d for d in balance_input.cultivation_details},
            time_frame=balance_input.time_frame,
        )


def calculate_field_balance(
    field_input: FieldInput,
    context: BalanceContext,
    deposition: NitrogenSupplyDeposition | None,
) -> FieldBalanceResult:
    """Calculate the nitrogen balance of one field.

    Formula:
        balance = supply.total + removal.total + emission.ammonia.total

    Nitrate leaching is derived from the surplus after ammonia and reported
    in emission, but is not part of the balance.

    Args:
        field_input: Field with its cultivations, harvests, soil analyses and applications
        context: Shared catalogues and farm time frame
        deposition: Atmospheric deposition for this field, None when not available

    Returns:
        FieldBalanceSuccess with the balance, or FieldBalanceFailure with a
        cleaned error message

    Raises:
        StructuralDataError: If reference data (soil type, groundwater class) is invalid
    """
    field = field_input.field
    try:
        if deposition is None:
            msg = f"Deposition data not found for field {field.b_id}"
            raise CalculationError(msg)

        time_frame = context.time_frame.intersect(field.b_start, field.b_end)
        soil_analysis = combine_soil_analyses(field_input.soil_analyses)

        supply = calculate_nitrogen_supply(
            field_input.fertilizer_applications,
            field_input.cultivations,
            soil_analysis,
            context.fertilizer_details,
            context.cultivation_details,
            deposition,
            time_frame,
        )
        removal = calculate_nitrogen_removal(
            field_input.cultivations,
            field_input.harvests,
            context.cultivation_details,
        )
        emission = calculate_nitrogen_emission(
            field_input.cultivations,
            field_input.harvests,
            field_input.fertilizer_applications,
            soil_analysis,
            context.cultivation_details,
            context.fertilizer_details,
            surplus_before_ammonia=supply.total + removal.total,
        )
        target = calculate_target_for_nitrogen_balance(
            field_input.cultivations,
            soil_analysis,
            context.cultivation_details,
            time_frame,
        )
    except StructuralDataError:
        raise
    except Exception as e:
        logger.warning(f"Nitrogen balance failed for field {field.b_id}: {e}")
        return FieldBalanceFailure(
            b_id=field.b_id,
            b_area=field.b_area,
            error_message=strip_error_prefixes(str(e)),
        )

    balance = NitrogenBalanceField(
        b_id=field.b_id,
        balance=supply.total + removal.total + emission.ammonia.total,
        supply=supply,
        removal=removal,
        emission=emission,
        target=target,
    )
    return FieldBalanceSuccess(b_id=field.b_id, b_area=field.b_area, balance=balance)
