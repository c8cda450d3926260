"""Regulatory target for the nitrogen balance.

The target is the balance a field is expected not to exceed. It depends on
whether the field is grassland, on the soil class and on the groundwater
regime, and is prorated to the length of the evaluation window.
"""

from decimal import Decimal

from nutrient_engine.config import CONSTANTS
from nutrient_engine.errors import UnknownGroundwaterClassError, UnknownSoilTypeError
from nutrient_engine.models.domain import (
    Cultivation,
    CultivationDetail,
    SoilAnalysisPicked,
    TimeFrame,
)
from nutrient_engine.models.enums import CropType, GroundwaterClass, SoilClass
from nutrient_engine.numeric import ZERO
from nutrient_engine.tables import GROUNDWATER_CLASSES, TARGET_SOIL_CLASSES, TARGET_VALUES


def classify_crop_type(
    cultivations: list[Cultivation],
    cultivation_details: dict[str, CultivationDetail],
) -> CropType:
    """Grassland if any cultivation's catalogue rotation is grass, otherwise arable."""
    for cultivation in cultivations:
        detail = cultivation_details.get(cultivation.b_lu_catalogue)
        if detail is not None and detail.b_lu_croprotation == "grass":
            return CropType.GRASSLAND
    return CropType.ARABLE


def classify_soil(b_soiltype_agr: str) -> SoilClass:
    """Look up the soil class of a soil type code.

    Raises:
        UnknownSoilTypeError: If the code is not in the membership table
    """
    soil_class = TARGET_SOIL_CLASSES.get(b_soiltype_agr)
    if soil_class is None:
        msg = f"Unknown soil type: {b_soiltype_agr}"
        raise UnknownSoilTypeError(msg)
    return soil_class


def classify_groundwater(b_gwl_class: str) -> GroundwaterClass:
    """Look up the groundwater regime of a GWL class code.

    Raises:
        UnknownGroundwaterClassError: If the code is not in the membership tables
    """
    groundwater = GROUNDWATER_CLASSES.get(b_gwl_class)
    if groundwater is None:
        msg = f"Unknown groundwater class: {b_gwl_class}"
        raise UnknownGroundwaterClassError(msg)
    return groundwater


def calculate_target_for_nitrogen_balance(
    cultivations: list[Cultivation],
    soil_analysis: SoilAnalysisPicked,
    cultivation_details: dict[str, CultivationDetail],
    time_frame: TimeFrame,
) -> Decimal:
    """Calculate the nitrogen balance target of a field.

    Classifies the field, selects the yearly base value from the target
    table and scales it to the evaluation window.

    Formula:
        target = base * (days + 1) / 365

    where days is the calendar-day difference between end and start, so a
    full calendar year (Jan 1 - Dec 31) yields exactly the base value.

    Args:
        cultivations: Cultivations on the field
        soil_analysis: Combined soil record
        cultivation_details: Crop catalogue indexed by catalogue key
        time_frame: Field-local evaluation window

    Returns:
        Target in kg N/ha for the window

    Raises:
        UnknownSoilTypeError: If the soil type code is not recognised
        UnknownGroundwaterClassError: If the GWL class code is not recognised
    """
    crop_type = classify_crop_type(cultivations, cultivation_details)
    soil_class = classify_soil(soil_analysis.b_soiltype_agr)
    groundwater = classify_groundwater(soil_analysis.b_gwl_class)

    base = TARGET_VALUES[(crop_type, soil_class, groundwater)]

    days = (time_frame.end - time_frame.start).days
    if days < 0:
        return ZERO
    return base * (days + 1) / CONSTANTS.DAYS_PER_YEAR
