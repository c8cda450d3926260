"""Aggregation of field nitrogen balances to farm level.

Farm values are area-weighted averages (kg N/ha) over the fields that were
calculated successfully. Areas are taken from the field inputs.
"""

import logging
from collections.abc import Callable
from decimal import Decimal

from nutrient_engine.models.domain import FieldInput
from nutrient_engine.models.results import (
    FarmAmmonia,
    FarmEmission,
    FarmFertilizerTotals,
    FarmRemoval,
    FarmSupply,
    FertilizerBreakdown,
    FieldBalanceResult,
    FieldBalanceSuccess,
    NitrogenBalance,
    NitrogenBalanceField,
)
from nutrient_engine.numeric import ZERO, to_decimal

logger = logging.getLogger(__name__)


def _fertilizer_totals(
    weighted: Callable[[Callable[[NitrogenBalanceField], Decimal]], Decimal],
    breakdown: Callable[[NitrogenBalanceField], FertilizerBreakdown],
) -> FarmFertilizerTotals:
    return FarmFertilizerTotals(
        total=weighted(lambda b: breakdown(b).total),
        mineral=weighted(lambda b: breakdown(b).mineral.total),
        manure=weighted(lambda b: breakdown(b).manure.total),
        compost=weighted(lambda b: breakdown(b).compost.total),
        other=weighted(lambda b: breakdown(b).other.total),
    )


def aggregate_field_balances_to_farm(
    results: list[FieldBalanceResult],
    fields: list[FieldInput],
    has_errors: bool = False,
    field_error_messages: list[str] | None = None,
) -> NitrogenBalance:
    """Aggregate field balances to a farm balance.

    Formula (for every supply, removal, emission and target value):
        farm_value = sum(value * b_area) / sum(b_area)

    taken over the successful fields. With a total area of 0 all farm values
    are 0. The farm balance is avg supply + avg removal + avg ammonia.

    Args:
        results: Field results in input order
        fields: Field inputs, the source of each field's area
        has_errors: Errors already detected before aggregation
        field_error_messages: Messages of failed fields

    Returns:
        Farm balance. has_errors is also set when any result is a failure.
    """
    areas = {f.field.b_id: to_decimal(f.field.b_area) for f in fields}
    successes = [r for r in results if isinstance(r, FieldBalanceSuccess)]

    weighted_fields: list[tuple[NitrogenBalanceField, Decimal]] = []
    for result in successes:
        if result.b_id not in areas:
            logger.warning(f"Could not find field input for field balance {result.b_id}")
            continue
        weighted_fields.append((result.balance, areas[result.b_id]))

    total_area = sum((area for _, area in weighted_fields), ZERO)

    def weighted(value: Callable[[NitrogenBalanceField], Decimal]) -> Decimal:
        if total_area == ZERO:
            return ZERO
        return sum((value(b) * area for b, area in weighted_fields), ZERO) / total_area

    supply = FarmSupply(
        total=weighted(lambda b: b.supply.total),
        fertilizers=_fertilizer_totals(weighted, lambda b: b.supply.fertilizers),
        fixation=weighted(lambda b: b.supply.fixation.total),
        deposition=weighted(lambda b: b.supply.deposition.total),
        mineralisation=weighted(lambda b: b.supply.mineralisation.total),
    )
    removal = FarmRemoval(
        total=weighted(lambda b: b.removal.total),
        harvests=weighted(lambda b: b.removal.harvests.total),
        residues=weighted(lambda b: b.removal.residues.total),
    )
    ammonia = FarmAmmonia(
        total=weighted(lambda b: b.emission.ammonia.total),
        fertilizers=_fertilizer_totals(weighted, lambda b: b.emission.ammonia.fertilizers),
        residues=weighted(lambda b: b.emission.ammonia.residues.total),
    )
    nitrate = weighted(lambda b: b.emission.nitrate.total)
    emission = FarmEmission(total=ammonia.total + nitrate, ammonia=ammonia, nitrate=nitrate)

    return NitrogenBalance(
        balance=supply.total + removal.total + ammonia.total,
        supply=supply,
        removal=removal,
        emission=emission,
        target=weighted(lambda b: b.target),
        fields=results,
        has_errors=has_errors or len(results) != len(successes),
        field_error_messages=list(field_error_messages or []),
    )
