"""Nitrogen removal via harvested products and crop residues.

Removal values are negative (kg N/ha) so they can be added to supply.
"""

from decimal import Decimal

from nutrient_engine.config import CONSTANTS
from nutrient_engine.errors import CalculationError
from nutrient_engine.models.domain import Cultivation, CultivationDetail, Harvest
from nutrient_engine.models.results import (
    CultivationBreakdown,
    EntityValue,
    HarvestBreakdown,
    NitrogenRemoval,
)
from nutrient_engine.numeric import ONE, ZERO, decimal_sum, to_decimal


def get_cultivation_detail(
    cultivation: Cultivation, cultivation_details: dict[str, CultivationDetail]
) -> CultivationDetail:
    """Catalogue entry of a cultivation.

    Raises:
        CalculationError: If the catalogue has no entry for the cultivation
    """
    detail = cultivation_details.get(cultivation.b_lu_catalogue)
    if detail is None:
        msg = f"Cultivation {cultivation.b_lu} has no corresponding cultivation in cultivationDetails"
        raise CalculationError(msg)
    return detail


def average_harvest_yield(
    cultivation: Cultivation, harvests: list[Harvest], detail: CultivationDetail
) -> Decimal:
    """Average yield over a cultivation's harvests.

    Each harvest contributes the first measured yield of its analyses, or
    the catalogue default when none was measured. Without harvests the
    catalogue default is returned.
    """
    yields = []
    for harvest in harvests:
        if harvest.b_lu != cultivation.b_lu:
            continue
        measured = harvest.first_measured_yield()
        yields.append(measured if measured is not None else to_decimal(detail.b_lu_yield))

    if not yields:
        return to_decimal(detail.b_lu_yield)
    return decimal_sum(yields) / len(yields)


def calculate_nitrogen_removal_by_harvests(
    cultivations: list[Cultivation],
    harvests: list[Harvest],
    cultivation_details: dict[str, CultivationDetail],
) -> HarvestBreakdown:
    """Calculate nitrogen exported with harvested products.

    Formula (per analysis, averaged over the analyses of a harvest):
        removal = -(b_lu_yield * b_lu_n_harvestable) / 1000

    Missing or zero measured values fall back to the catalogue defaults of
    the harvested cultivation.

    Args:
        cultivations: Cultivations on the field
        harvests: Harvests on the field
        cultivation_details: Crop catalogue indexed by catalogue key

    Returns:
        Total removal and the value per harvest

    Raises:
        CalculationError: If a harvest's cultivation or its catalogue entry is missing
    """
    catalogue_by_cultivation = {c.b_lu: c.b_lu_catalogue for c in cultivations}

    values = []
    for harvest in harvests:
        b_lu_catalogue = catalogue_by_cultivation.get(harvest.b_lu)
        if not b_lu_catalogue:
            msg = (
                f"Harvest {harvest.b_id_harvesting}: cultivation with b_lu "
                f"'{harvest.b_lu}' is missing b_lu_catalogue"
            )
            raise CalculationError(msg)

        detail = cultivation_details.get(b_lu_catalogue)
        if detail is None:
            msg = f"Cultivation {b_lu_catalogue} has no corresponding cultivation in cultivationDetails"
            raise CalculationError(msg)

        removals = [
            -(
                to_decimal(analysis.b_lu_yield or detail.b_lu_yield)
                * to_decimal(analysis.b_lu_n_harvestable or detail.b_lu_n_harvestable)
                / CONSTANTS.GRAMS_PER_KILOGRAM
            )
            for analysis in harvest.analyses
        ]
        value = decimal_sum(removals) / len(removals) if removals else ZERO
        values.append(EntityValue(id=harvest.b_id_harvesting, value=value))

    return HarvestBreakdown(total=decimal_sum(v.value for v in values), harvests=values)


def calculate_nitrogen_removal_by_residues(
    cultivations: list[Cultivation],
    harvests: list[Harvest],
    cultivation_details: dict[str, CultivationDetail],
) -> CultivationBreakdown:
    """Calculate nitrogen in crop residues left on the field.

    Formula:
        removal = -(yield / b_lu_hi) * (1 - b_lu_hi) * b_lu_n_residue / 1000

    where yield is the average harvest yield of the cultivation. Cultivations
    without residues left behind, or with a harvest index of 0, remove nothing.

    Raises:
        CalculationError: If a cultivation's catalogue entry is missing
    """
    values = []
    for cultivation in cultivations:
        detail = get_cultivation_detail(cultivation, cultivation_details)
        b_lu_hi = to_decimal(detail.b_lu_hi)
        if not cultivation.m_cropresidue or b_lu_hi == ZERO:
            values.append(EntityValue(id=cultivation.b_lu, value=ZERO))
            continue

        b_lu_yield = average_harvest_yield(cultivation, harvests, detail)
        value = -(
            b_lu_yield
            / b_lu_hi
            * (ONE - b_lu_hi)
            * to_decimal(detail.b_lu_n_residue)
            / CONSTANTS.GRAMS_PER_KILOGRAM
        )
        values.append(EntityValue(id=cultivation.b_lu, value=value))

    return CultivationBreakdown(total=decimal_sum(v.value for v in values), cultivations=values)


def calculate_nitrogen_removal(
    cultivations: list[Cultivation],
    harvests: list[Harvest],
    cultivation_details: dict[str, CultivationDetail],
) -> NitrogenRemoval:
    """Calculate total nitrogen removal of a field.

    Raises:
        CalculationError: If harvest or residue removal cannot be calculated
    """
    try:
        harvest_removal = calculate_nitrogen_removal_by_harvests(
            cultivations, harvests, cultivation_details
        )
        residue_removal = calculate_nitrogen_removal_by_residues(
            cultivations, harvests, cultivation_details
        )
    except CalculationError as e:
        msg = f"Failed to calculate nitrogen removal: {e}"
        raise CalculationError(msg) from e

    return NitrogenRemoval(
        total=harvest_removal.total + residue_removal.total,
        harvests=harvest_removal,
        residues=residue_removal,
    )
