"""Builders for test inputs."""

from datetime import date
from decimal import Decimal

from nutrient_engine.models import (
    Cultivation,
    FertilizerApplication,
    FieldDetails,
    FieldInput,
    Harvest,
    HarvestAnalysis,
    SoilAnalysis,
)


def make_field_input(
    b_id: str,
    b_area: Decimal | int = 1,
    soil_analyses: list[SoilAnalysis] | None = None,
    applications: list[FertilizerApplication] | None = None,
    crop: str = "nl_265",
) -> FieldInput:
    """Field with one full-year 2025 cultivation, one harvest and the given soil analyses."""
    cultivation = Cultivation(
        b_lu=f"{b_id}_lu",
        b_lu_catalogue=crop,
        b_lu_start=date(2025, 1, 1),
        b_lu_end=date(2025, 12, 31),
        m_cropresidue=False,
    )
    harvest = Harvest(
        b_id_harvesting=f"{b_id}_harvest",
        b_lu=cultivation.b_lu,
        b_lu_harvest_date=date(2025, 7, 1),
        analyses=[HarvestAnalysis(b_lu_yield=Decimal(10000), b_lu_n_harvestable=Decimal(30))],
    )
    return FieldInput(
        field=FieldDetails(b_id=b_id, b_area=Decimal(b_area), b_centroid=(5.6, 52.0)),
        cultivations=[cultivation],
        harvests=[harvest],
        soil_analyses=soil_analyses or [],
        fertilizer_applications=applications or [],
    )


def make_application(
    p_app_id: str,
    p_id_catalogue: str,
    amount: Decimal | int,
    app_date: date = date(2025, 3, 15),
    method: str | None = "broadcasting",
) -> FertilizerApplication:
    return FertilizerApplication(
        p_app_id=p_app_id,
        p_id_catalogue=p_id_catalogue,
        p_app_amount=Decimal(amount),
        p_app_method=method,
        p_app_date=app_date,
    )
