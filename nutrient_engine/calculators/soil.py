"""Soil parameter conversions and combination of soil analyses.

A field often has several soil analyses, each reporting a different subset
of parameters. The balance needs one representative record, so the most
recent value of each parameter is taken and remaining gaps are estimated
from related parameters with the pedotransfer functions below.
"""

import logging
from datetime import date
from decimal import Decimal

from nutrient_engine.errors import MissingSoilParametersError
from nutrient_engine.models.domain import SoilAnalysis, SoilAnalysisPicked
from nutrient_engine.numeric import clamp
from nutrient_engine.tables import SANDY_DENSITY_SOILS

logger = logging.getLogger(__name__)

_COMBINED_PARAMETERS = (
    "b_soiltype_agr",
    "a_n_rt",
    "a_c_of",
    "a_cn_fr",
    "a_density_sa",
    "a_som_loi",
    "b_gwl_class",
)
_REQUIRED_PARAMETERS = (
    "b_soiltype_agr",
    "a_n_rt",
    "a_c_of",
    "a_cn_fr",
    "a_density_sa",
    "b_gwl_class",
)


def calculate_organic_carbon(a_som_loi: Decimal | None) -> Decimal | None:
    """Estimate organic carbon from organic matter content.

    Formula:
        a_c_of = a_som_loi * 0.5 * 10

    Args:
        a_som_loi: Organic matter (%)

    Returns:
        Organic carbon (g C/kg) clamped to [0.1, 600], or None without input
    """
    if not a_som_loi:
        return None
    return clamp(a_som_loi * Decimal("0.5") * 10, Decimal("0.1"), Decimal(600))


def calculate_organic_matter(a_c_of: Decimal | None) -> Decimal | None:
    """Estimate organic matter content from organic carbon.

    Formula:
        a_som_loi = a_c_of / 10 / 0.5

    Returns:
        Organic matter (%) clamped to [0.5, 75], or None without input
    """
    if not a_c_of:
        return None
    return clamp(a_c_of / 10 / Decimal("0.5"), Decimal("0.5"), Decimal(75))


def calculate_carbon_nitrogen_ratio(
    a_c_of: Decimal | None, a_n_rt: Decimal | None
) -> Decimal | None:
    """Calculate the C/N ratio from organic carbon and total nitrogen.

    Formula:
        a_cn_fr = a_c_of / (a_n_rt / 1000)

    Args:
        a_c_of: Organic carbon (g C/kg)
        a_n_rt: Total nitrogen (mg N/kg)

    Returns:
        C/N ratio clamped to [5, 40], or None when either input is missing
    """
    if not a_c_of or not a_n_rt:
        return None
    return clamp(a_c_of / (a_n_rt / 1000), Decimal(5), Decimal(40))


def calculate_bulk_density(
    a_som_loi: Decimal | None, b_soiltype_agr: str | None
) -> Decimal | None:
    """Estimate soil bulk density from organic matter and soil type.

    Formula (sandy soils: dekzand, dalgrond, duinzand, loess):
        density = 1 / (som * 0.02525 + 0.6541)

    Formula (other soils):
        density = 0.00000067 * som^4 - 0.00007792 * som^3
                  + 0.00314712 * som^2 - 0.06039523 * som + 1.33932206

    Args:
        a_som_loi: Organic matter (%)
        b_soiltype_agr: Agricultural soil type code

    Returns:
        Bulk density (g/cm3) clamped to [0.5, 3], or None when either input is missing
    """
    if not a_som_loi or not b_soiltype_agr:
        return None

    som = a_som_loi
    if b_soiltype_agr in SANDY_DENSITY_SOILS:
        density = 1 / (som * Decimal("0.02525") + Decimal("0.6541"))
    else:
        density = (
            som**4 * Decimal("0.00000067")
            - som**3 * Decimal("0.00007792")
            + som**2 * Decimal("0.00314712")
            - som * Decimal("0.06039523")
            + Decimal("1.33932206")
        )
    return clamp(density, Decimal("0.5"), Decimal(3))


def combine_soil_analyses(soil_analyses: list[SoilAnalysis]) -> SoilAnalysisPicked:
    """Combine a field's soil analyses into one representative record.

    For every parameter the value from the most recent analysis that reports
    it wins (analyses without a sampling date rank last). Missing organic
    carbon, organic matter, C/N ratio and bulk density are then estimated
    from the other parameters.

    Args:
        soil_analyses: All analyses of the field

    Returns:
        Combined soil record

    Raises:
        MissingSoilParametersError: If a required parameter is still missing
    """
    ordered = sorted(
        soil_analyses,
        key=lambda a: a.b_sampling_date or date.min,
        reverse=True,
    )

    picked: dict[str, object] = {}
    for parameter in _COMBINED_PARAMETERS:
        picked[parameter] = next(
            (getattr(a, parameter) for a in ordered if getattr(a, parameter) is not None),
            None,
        )

    # Estimate gaps from related parameters
    if picked["a_c_of"] is None:
        picked["a_c_of"] = calculate_organic_carbon(picked["a_som_loi"])
    if picked["a_som_loi"] is None:
        picked["a_som_loi"] = calculate_organic_matter(picked["a_c_of"])
    if picked["a_cn_fr"] is None:
        picked["a_cn_fr"] = calculate_carbon_nitrogen_ratio(picked["a_c_of"], picked["a_n_rt"])
    if picked["a_density_sa"] is None:
        picked["a_density_sa"] = calculate_bulk_density(
            picked["a_som_loi"], picked["b_soiltype_agr"]
        )

    missing = [p for p in _REQUIRED_PARAMETERS if picked[p] is None]
    if missing:
        msg = f"Missing required soil parameters: {', '.join(missing)}"
        raise MissingSoilParametersError(msg)

    logger.debug(f"Combined {len(soil_analyses)} soil analyses")
    return SoilAnalysisPicked(**picked)
