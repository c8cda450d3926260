"""Nitrogen supply calculations.

Supply covers fertilizer applications, biological fixation by crops,
atmospheric deposition and mineralisation of soil organic matter. All values
are kg N/ha over the evaluation window and positive.
"""

import calendar
import logging
from datetime import date
from decimal import Decimal

from nutrient_engine.config import CONSTANTS
from nutrient_engine.errors import CalculationError
from nutrient_engine.models.domain import (
    Cultivation,
    CultivationDetail,
    FertilizerApplication,
    FertilizerDetail,
    SoilAnalysisPicked,
    TimeFrame,
)
from nutrient_engine.models.enums import FertilizerType
from nutrient_engine.models.results import (
    ApplicationGroup,
    CultivationBreakdown,
    EntityValue,
    FertilizerBreakdown,
    MineralizationYear,
    NitrogenSupply,
    NitrogenSupplyDeposition,
    NitrogenSupplyMineralization,
)
from nutrient_engine.numeric import ONE, ZERO, decimal_sum, to_decimal
from nutrient_engine.tables import MINERALIZATION_DEFAULTS

logger = logging.getLogger(__name__)


def group_by_fertilizer_type(entries: list[tuple[FertilizerType, EntityValue]]) -> FertilizerBreakdown:
    """Group application values into the four fertilizer categories."""
    groups: dict[FertilizerType, list[EntityValue]] = {t: [] for t in FertilizerType}
    for fertilizer_type, entry in entries:
        groups[fertilizer_type].append(entry)

    built = {
        t.value: ApplicationGroup(
            total=decimal_sum(e.value for e in values), applications=values
        )
        for t, values in groups.items()
    }
    return FertilizerBreakdown(
        total=decimal_sum(group.total for group in built.values()), **built
    )


def calculate_nitrogen_supply_by_fertilizers(
    applications: list[FertilizerApplication],
    fertilizer_details: dict[str, FertilizerDetail],
) -> FertilizerBreakdown:
    """Calculate nitrogen supplied by fertilizer applications.

    Formula:
        supply = p_app_amount * p_n_rt * p_n_wc / 1000

    p_n_rt is g N per kg product and p_app_amount kg product per ha, so the
    result is kg N/ha. A missing working coefficient counts as 1.

    Args:
        applications: Fertilizer applications on the field
        fertilizer_details: Fertilizer catalogue indexed by catalogue key

    Returns:
        Supply per fertilizer category with per-application breakdown

    Raises:
        CalculationError: If an application references an unknown fertilizer
    """
    entries: list[tuple[FertilizerType, EntityValue]] = []
    for application in applications:
        detail = fertilizer_details.get(application.p_id_catalogue)
        if detail is None:
            msg = f"Fertilizer application {application.p_app_id} has no fertilizerDetails"
            raise CalculationError(msg)

        value = (
            to_decimal(application.p_app_amount)
            * to_decimal(detail.p_n_rt)
            * to_decimal(detail.p_n_wc, default=ONE)
            / CONSTANTS.GRAMS_PER_KILOGRAM
        )
        entries.append(
            (FertilizerType.from_code(detail.p_type), EntityValue(id=application.p_app_id, value=value))
        )

    return group_by_fertilizer_type(entries)


def calculate_nitrogen_fixation(
    cultivations: list[Cultivation],
    cultivation_details: dict[str, CultivationDetail],
) -> CultivationBreakdown:
    """Calculate biological nitrogen fixation per cultivation.

    Uses the catalogue value b_n_fixation (kg N/ha); cultivations without
    a catalogue value fix nothing.

    Raises:
        CalculationError: If a cultivation's catalogue entry is missing
    """
    values = []
    for cultivation in cultivations:
        detail = cultivation_details.get(cultivation.b_lu_catalogue)
        if detail is None:
            msg = f"Cultivation {cultivation.b_lu} has no corresponding cultivation in cultivationDetails"
            raise CalculationError(msg)
        values.append(EntityValue(id=cultivation.b_lu, value=to_decimal(detail.b_n_fixation)))

    return CultivationBreakdown(total=decimal_sum(v.value for v in values), cultivations=values)


def _is_grassland_in_year(
    year: int,
    cultivations: list[Cultivation],
    cultivation_details: dict[str, CultivationDetail],
) -> bool:
    """Grassland when a grass cultivation overlaps 15 May - 15 July of the year."""
    window_start = date(year, *CONSTANTS.GRASSLAND_WINDOW_START)
    window_end = date(year, *CONSTANTS.GRASSLAND_WINDOW_END)
    for cultivation in cultivations:
        detail = cultivation_details.get(cultivation.b_lu_catalogue)
        if detail is None or detail.b_lu_croprotation != "grass":
            continue
        cultivation_end = cultivation.b_lu_end or date.max
        if cultivation.b_lu_start <= window_end and cultivation_end >= window_start:
            return True
    return False


def calculate_nitrogen_supply_by_mineralization(
    cultivations: list[Cultivation],
    soil_analysis: SoilAnalysisPicked,
    cultivation_details: dict[str, CultivationDetail],
    time_frame: TimeFrame,
) -> NitrogenSupplyMineralization:
    """Calculate nitrogen supplied by mineralisation of soil organic matter.

    For each calendar year touched by the window the yearly default rate is
    selected (dalgrond 20; veen 160 on grassland, 20 otherwise; other soils
    0) and prorated by the number of window days in that year.

    Formula:
        value_year = rate * overlap_days / days_in_year

    overlap_days counts from max(year start, window start) up to
    min(next year start, window end), exclusive of the end day.

    Args:
        cultivations: Cultivations on the field
        soil_analysis: Combined soil record
        cultivation_details: Crop catalogue indexed by catalogue key
        time_frame: Field-local evaluation window

    Returns:
        Total mineralisation and its value per year
    """
    years = []
    for year in range(time_frame.start.year, time_frame.end.year + 1):
        is_grassland = _is_grassland_in_year(year, cultivations, cultivation_details)
        rate = MINERALIZATION_DEFAULTS.get((soil_analysis.b_soiltype_agr, is_grassland), ZERO)

        overlap_start = max(date(year, 1, 1), time_frame.start)
        overlap_end = min(date(year + 1, 1, 1), time_frame.end)
        if overlap_start >= overlap_end:
            continue

        days_in_year = (
            CONSTANTS.DAYS_PER_LEAP_YEAR if calendar.isleap(year) else CONSTANTS.DAYS_PER_YEAR
        )
        overlap_days = (overlap_end - overlap_start).days
        years.append(MineralizationYear(year=year, value=rate * overlap_days / days_in_year))

    return NitrogenSupplyMineralization(total=decimal_sum(y.value for y in years), years=years)


def calculate_mineralization_minip(
    a_c_of: Decimal | None,
    a_cn_fr: Decimal | None,
    a_density_sa: Decimal | None,
    mean_temperature: Decimal = Decimal("10.6"),
    topsoil_depth_cm: Decimal = Decimal(20),
) -> Decimal:
    """Estimate yearly mineralisation with the MINIP model.

    Formula:
        temp_corr = 0.1 * T                      (-1 < T <= 9)
                  = 2 ** ((T - 9) / 9)           (9 < T <= 27)
        c_dec = a_c_of * (1 - exp(4.7 * ((17 + 10 * temp_corr) ** -0.6 - 17 ** -0.6))) / 10
        N_min = (1.5 * c_dec / a_cn_fr - c_dec / depth) * 10000 * depth / 100 * a_density_sa

    Args:
        a_c_of: Organic carbon (g C/kg)
        a_cn_fr: C/N ratio
        a_density_sa: Bulk density (g/cm3)
        mean_temperature: Average yearly temperature (degrees C)
        topsoil_depth_cm: Depth of the plough layer (cm)

    Returns:
        Mineralisation in kg N/ha/year

    Raises:
        CalculationError: If an input is missing or the temperature is out of range
    """
    if mean_temperature > 27:
        msg = "Average yearly temperature is too high"
        raise CalculationError(msg)
    if mean_temperature > 9:
        temperature_correction = Decimal(2) ** ((mean_temperature - 9) / 9)
    elif mean_temperature > -1:
        temperature_correction = mean_temperature * Decimal("0.1")
    else:
        temperature_correction = ZERO

    for name, value in (("a_c_of", a_c_of), ("a_cn_fr", a_cn_fr), ("a_density_sa", a_density_sa)):
        if value is None:
            msg = f"No {name} value found in soil analysis"
            raise CalculationError(msg)

    exponent = Decimal("-0.6")
    decay = (
        (Decimal(17) + temperature_correction * 10) ** exponent - Decimal(17) ** exponent
    ) * Decimal("4.7")
    c_dec = a_c_of * (ONE - decay.exp()) / 10

    return (
        (Decimal("1.5") * c_dec / a_cn_fr - c_dec / topsoil_depth_cm)
        * 10000
        * (topsoil_depth_cm / 100)
        * a_density_sa
    )


def calculate_nitrogen_supply(
    applications: list[FertilizerApplication],
    cultivations: list[Cultivation],
    soil_analysis: SoilAnalysisPicked,
    fertilizer_details: dict[str, FertilizerDetail],
    cultivation_details: dict[str, CultivationDetail],
    deposition: NitrogenSupplyDeposition,
    time_frame: TimeFrame,
) -> NitrogenSupply:
    """Calculate the total nitrogen supply of a field.

    Returns:
        Supply with breakdown by fertilizers, fixation, deposition and mineralisation

    Raises:
        CalculationError: If any supply component cannot be calculated
    """
    try:
        fertilizers = calculate_nitrogen_supply_by_fertilizers(applications, fertilizer_details)
        fixation = calculate_nitrogen_fixation(cultivations, cultivation_details)
        mineralisation = calculate_nitrogen_supply_by_mineralization(
            cultivations, soil_analysis, cultivation_details, time_frame
        )
    except CalculationError as e:
        msg = f"Failed to calculate nitrogen supply: {e}"
        raise CalculationError(msg) from e

    total = fertilizers.total + fixation.total + deposition.total + mineralisation.total
    return NitrogenSupply(
        total=total,
        fertilizers=fertilizers,
        fixation=fixation,
        deposition=deposition,
        mineralisation=mineralisation,
    )
