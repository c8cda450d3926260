"""Domain and result models for the calculation engine."""

from nutrient_engine.models.domain import (
    Cultivation,
    CultivationDetail,
    FertilizerApplication,
    FertilizerDetail,
    FieldDetails,
    FieldInput,
    Harvest,
    HarvestAnalysis,
    NitrogenBalanceInput,
    NormFertilizer,
    NormFillingInput,
    SoilAnalysis,
    SoilAnalysisPicked,
    TimeFrame,
)
from nutrient_engine.models.results import (
    FieldBalanceFailure,
    FieldBalanceResult,
    FieldBalanceSuccess,
    NitrogenBalance,
    NitrogenBalanceField,
    NormFilling,
)

__all__ = [
    "TimeFrame",
    "FieldDetails",
    "Cultivation",
    "Harvest",
    "HarvestAnalysis",
    "FertilizerApplication",
    "SoilAnalysis",
    "SoilAnalysisPicked",
    "FieldInput",
    "CultivationDetail",
    "FertilizerDetail",
    "NitrogenBalanceInput",
    "NormFertilizer",
    "NormFillingInput",
    "NitrogenBalanceField",
    "FieldBalanceSuccess",
    "FieldBalanceFailure",
    "FieldBalanceResult",
    "NitrogenBalance",
    "NormFilling",
]
