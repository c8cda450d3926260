"""Nitrogen emission via ammonia volatilisation and nitrate leaching.

Ammonia is lost from fertilizer applications and from crop residues. Nitrate
leaching is derived from the field's surplus: a soil- and land-use-dependent
fraction of the positive part of supply + removal + ammonia emission.
All emission values are negative (kg N/ha).
"""

import logging
from decimal import Decimal

from nutrient_engine.calculators.removal import average_harvest_yield, get_cultivation_detail
from nutrient_engine.calculators.supply import group_by_fertilizer_type
from nutrient_engine.config import CONSTANTS
from nutrient_engine.errors import (
    CalculationError,
    UnknownGroundwaterClassError,
    UnknownSoilTypeError,
)
from nutrient_engine.models.domain import (
    Cultivation,
    CultivationDetail,
    FertilizerApplication,
    FertilizerDetail,
    Harvest,
    SoilAnalysisPicked,
)
from nutrient_engine.models.enums import FertilizerType, LandType
from nutrient_engine.models.results import (
    CultivationBreakdown,
    EntityValue,
    FertilizerBreakdown,
    NitrogenEmission,
    NitrogenEmissionAmmonia,
    NitrogenEmissionNitrate,
)
from nutrient_engine.numeric import ONE, ZERO, clamp, decimal_sum, to_decimal
from nutrient_engine.tables import (
    AMMONIA_EMISSION_FACTORS,
    BARE_SOIL_CROP_CODES,
    CLAY_LEACHING_SOILS,
    CROPLAND_ROTATIONS,
    GRASSLAND_ROTATIONS,
    MINERAL_EF_N_ORG,
    MINERAL_EF_NH4,
    MINERAL_EF_NO3_S,
    NITRATE_LEACHING_CLAY,
    NITRATE_LEACHING_LOESS,
    NITRATE_LEACHING_PEAT,
    NITRATE_LEACHING_SAND,
    SANDY_LEACHING_SOILS,
)

logger = logging.getLogger(__name__)


def determine_land_type_at_application(
    application: FertilizerApplication,
    cultivations: list[Cultivation],
    cultivation_details: dict[str, CultivationDetail],
) -> LandType:
    """Classify the land use on the day of an application.

    Grassland wins over cropland, which wins over bare soil. Cultivations
    with a bare-soil crop code never count as grassland or cropland.
    """
    has_grassland = False
    has_cropland = False
    for cultivation in cultivations:
        if not cultivation.is_active_on(application.p_app_date):
            continue
        if cultivation.b_lu_catalogue in BARE_SOIL_CROP_CODES:
            continue
        detail = cultivation_details.get(cultivation.b_lu_catalogue)
        rotation = detail.b_lu_croprotation if detail else None
        if rotation in GRASSLAND_ROTATIONS:
            has_grassland = True
        if rotation in CROPLAND_ROTATIONS:
            has_cropland = True

    if has_grassland:
        return LandType.GRASSLAND
    if has_cropland:
        return LandType.CROPLAND
    return LandType.BARE_SOIL


def determine_mineral_ammonia_emission_factor(detail: FertilizerDetail) -> Decimal:
    """Ammonia emission factor of a mineral fertilizer from its composition.

    Formula:
        n_org = p_n_rt - p_no3_rt - p_nh4_rt
        ef = n_org^2 * 7.021e-5 + p_no3_rt * p_s_rt * -4.308e-5 + p_nh4_rt^2 * 2.498e-4
    """
    p_no3_rt = to_decimal(detail.p_no3_rt)
    p_nh4_rt = to_decimal(detail.p_nh4_rt)
    p_n_org = to_decimal(detail.p_n_rt) - p_no3_rt - p_nh4_rt
    return (
        p_n_org**2 * MINERAL_EF_N_ORG
        + p_no3_rt * to_decimal(detail.p_s_rt) * MINERAL_EF_NO3_S
        + p_nh4_rt**2 * MINERAL_EF_NH4
    )


def determine_manure_ammonia_emission_factor(
    application: FertilizerApplication,
    cultivations: list[Cultivation],
    cultivation_details: dict[str, CultivationDetail],
) -> Decimal:
    """Ammonia emission factor of an organic fertilizer application.

    Looks up the application method against the land type at the time of
    application.

    Raises:
        CalculationError: If the application method is not supported
    """
    factors = AMMONIA_EMISSION_FACTORS.get(application.p_app_method or "")
    if factors is None:
        msg = (
            f"Unsupported application method {application.p_app_method} for "
            f"{application.p_name} ({application.p_id_catalogue})"
        )
        raise CalculationError(msg)
    land_type = determine_land_type_at_application(application, cultivations, cultivation_details)
    return factors[land_type]


def calculate_ammonia_emission_by_fertilizers(
    cultivations: list[Cultivation],
    applications: list[FertilizerApplication],
    cultivation_details: dict[str, CultivationDetail],
    fertilizer_details: dict[str, FertilizerDetail],
) -> FertilizerBreakdown:
    """Calculate ammonia volatilised from fertilizer applications.

    Formula (mineral fertilizers):
        emission = -(p_app_amount * p_n_rt * ef) / 1000
        ef = p_ef_nh3 if known, else the composition formula; clamped to [0, 1]

    Formula (manure, compost, other):
        emission = -(p_app_amount * p_nh4_rt * ef) / 1000
        ef = factor for (application method, land type)

    Args:
        cultivations: Cultivations on the field
        applications: Fertilizer applications on the field
        cultivation_details: Crop catalogue indexed by catalogue key
        fertilizer_details: Fertilizer catalogue indexed by catalogue key

    Returns:
        Emission per fertilizer category with per-application breakdown

    Raises:
        CalculationError: If a fertilizer is missing or an application method unsupported
    """
    entries: list[tuple[FertilizerType, EntityValue]] = []
    for application in applications:
        detail = fertilizer_details.get(application.p_id_catalogue)
        if detail is None:
            msg = f"Fertilizer application {application.p_app_id} has no fertilizerDetails"
            raise CalculationError(msg)

        fertilizer_type = FertilizerType.from_code(detail.p_type)
        amount = to_decimal(application.p_app_amount)
        if fertilizer_type is FertilizerType.MINERAL:
            if detail.p_ef_nh3 is not None:
                emission_factor = detail.p_ef_nh3
            else:
                emission_factor = determine_mineral_ammonia_emission_factor(detail)
            emission_factor = clamp(emission_factor, ZERO, ONE)
            nitrogen = to_decimal(detail.p_n_rt)
        else:
            emission_factor = determine_manure_ammonia_emission_factor(
                application, cultivations, cultivation_details
            )
            nitrogen = to_decimal(detail.p_nh4_rt)

        value = -(amount * nitrogen * emission_factor / CONSTANTS.GRAMS_PER_KILOGRAM)
        entries.append((fertilizer_type, EntityValue(id=application.p_app_id, value=value)))

    return group_by_fertilizer_type(entries)


def calculate_ammonia_emission_by_residues(
    cultivations: list[Cultivation],
    harvests: list[Harvest],
    cultivation_details: dict[str, CultivationDetail],
) -> CultivationBreakdown:
    """Calculate ammonia volatilised from crop residues.

    Formula:
        ef = (0.41 * b_lu_n_residue - 5.42) / 100, clamped to [0, 1]
        emission = -(yield / b_lu_hi) * (1 - b_lu_hi) * b_lu_n_residue * ef / 1000

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
        b_lu_n_residue = to_decimal(detail.b_lu_n_residue)
        emission_factor = clamp(
            (Decimal("0.41") * b_lu_n_residue - Decimal("5.42")) / CONSTANTS.PERCENT, ZERO, ONE
        )
        value = -(
            b_lu_yield
            / b_lu_hi
            * (ONE - b_lu_hi)
            * b_lu_n_residue
            * emission_factor
            / CONSTANTS.GRAMS_PER_KILOGRAM
        )
        values.append(EntityValue(id=cultivation.b_lu, value=value))

    return CultivationBreakdown(total=decimal_sum(v.value for v in values), cultivations=values)


def determine_nitrate_leaching_factor(
    land_type: LandType, b_soiltype_agr: str, b_gwl_class: str
) -> Decimal:
    """Fraction of the nitrogen surplus that leaches as nitrate.

    Peat, clay and loess soils have a fixed fraction per land type; sandy
    soils depend on the groundwater class as well. Bare soil is treated as
    cropland.

    Raises:
        UnknownSoilTypeError: If the soil type is not in the leaching tables
        UnknownGroundwaterClassError: If a sandy soil has an unknown GWL class
    """
    if land_type is LandType.BARE_SOIL:
        land_type = LandType.CROPLAND

    if b_soiltype_agr == "veen":
        return NITRATE_LEACHING_PEAT[land_type]
    if b_soiltype_agr in CLAY_LEACHING_SOILS:
        return NITRATE_LEACHING_CLAY[land_type]
    if b_soiltype_agr == "loess":
        return NITRATE_LEACHING_LOESS[land_type]
    if b_soiltype_agr in SANDY_LEACHING_SOILS:
        factors = NITRATE_LEACHING_SAND.get(b_gwl_class)
        if factors is None:
            msg = f"Unknown GWL class '{b_gwl_class}' for sandy soil '{b_soiltype_agr}'"
            raise UnknownGroundwaterClassError(msg)
        return factors[land_type]

    msg = f"Unknown soil type: {b_soiltype_agr}"
    raise UnknownSoilTypeError(msg)


def calculate_nitrate_emission(
    balance: Decimal,
    cultivations: list[Cultivation],
    soil_analysis: SoilAnalysisPicked,
    cultivation_details: dict[str, CultivationDetail],
) -> NitrogenEmissionNitrate:
    """Calculate nitrate leaching from the field's nitrogen surplus.

    Formula:
        nitrate = -(balance * leaching_factor)   if balance > 0
                = 0                              otherwise

    The land type is grassland when any cultivation has a grass rotation,
    otherwise cropland.

    Args:
        balance: Supply + removal + ammonia emission (kg N/ha)
        cultivations: Cultivations on the field
        soil_analysis: Combined soil record
        cultivation_details: Crop catalogue indexed by catalogue key

    Returns:
        Nitrate emission (kg N/ha, zero or negative)
    """
    is_grassland = any(
        (detail := cultivation_details.get(c.b_lu_catalogue)) is not None
        and detail.b_lu_croprotation == "grass"
        for c in cultivations
    )
    land_type = LandType.GRASSLAND if is_grassland else LandType.CROPLAND
    factor = determine_nitrate_leaching_factor(
        land_type, soil_analysis.b_soiltype_agr, soil_analysis.b_gwl_class
    )

    if balance <= ZERO:
        return NitrogenEmissionNitrate(total=ZERO)
    return NitrogenEmissionNitrate(total=-(balance * factor))


def calculate_nitrogen_emission(
    cultivations: list[Cultivation],
    harvests: list[Harvest],
    applications: list[FertilizerApplication],
    soil_analysis: SoilAnalysisPicked,
    cultivation_details: dict[str, CultivationDetail],
    fertilizer_details: dict[str, FertilizerDetail],
    surplus_before_ammonia: Decimal,
) -> NitrogenEmission:
    """Calculate ammonia and nitrate emission of a field.

    Args:
        cultivations: Cultivations on the field
        harvests: Harvests on the field
        applications: Fertilizer applications on the field
        soil_analysis: Combined soil record
        cultivation_details: Crop catalogue indexed by catalogue key
        fertilizer_details: Fertilizer catalogue indexed by catalogue key
        surplus_before_ammonia: Supply total + removal total (kg N/ha)

    Returns:
        Emission with ammonia breakdown and nitrate

    Raises:
        CalculationError: If the ammonia emission cannot be calculated
    """
    try:
        fertilizers = calculate_ammonia_emission_by_fertilizers(
            cultivations, applications, cultivation_details, fertilizer_details
        )
        residues = calculate_ammonia_emission_by_residues(
            cultivations, harvests, cultivation_details
        )
    except CalculationError as e:
        msg = f"Failed to calculate nitrogen emission: {e}"
        raise CalculationError(msg) from e

    ammonia = NitrogenEmissionAmmonia(
        total=fertilizers.total + residues.total,
        fertilizers=fertilizers,
        residues=residues,
    )
    nitrate = calculate_nitrate_emission(
        surplus_before_ammonia + ammonia.total, cultivations, soil_analysis, cultivation_details
    )
    return NitrogenEmission(total=ammonia.total + nitrate.total, ammonia=ammonia, nitrate=nitrate)
