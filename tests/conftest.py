"""Shared fixtures for the calculation tests."""

from datetime import date
from decimal import Decimal

import pytest

from nutrient_engine.models import (
    CultivationDetail,
    FertilizerApplication,
    FertilizerDetail,
    NitrogenBalanceInput,
    SoilAnalysis,
    TimeFrame,
)
from tests.utils import make_field_input


@pytest.fixture
def year_2025():
    """Calendar year 2025."""
    return TimeFrame(start=date(2025, 1, 1), end=date(2025, 12, 31))


@pytest.fixture
def cultivation_details():
    """Crop catalogue with a grass and a potato crop."""
    return {
        "nl_265": CultivationDetail(
            b_lu_catalogue="nl_265",
            b_lu_croprotation="grass",
            b_lu_yield=Decimal(10000),
            b_lu_hi=Decimal("0.8"),
            b_lu_n_harvestable=Decimal(30),
            b_lu_n_residue=Decimal(20),
            b_n_fixation=Decimal(0),
        ),
        "nl_2014": CultivationDetail(
            b_lu_catalogue="nl_2014",
            b_lu_croprotation="potato",
            b_lu_yield=Decimal(12000),
            b_lu_hi=Decimal("0.5"),
            b_lu_n_harvestable=Decimal(15),
            b_lu_n_residue=Decimal(10),
            b_n_fixation=Decimal(0),
        ),
    }


@pytest.fixture
def fertilizer_details():
    """Fertilizer catalogue with a mineral fertilizer and a slurry."""
    return {
        "can": FertilizerDetail(
            p_id_catalogue="can",
            p_type="mineral",
            p_n_rt=Decimal(270),
            p_no3_rt=Decimal(135),
            p_nh4_rt=Decimal(135),
            p_s_rt=Decimal(0),
            p_ef_nh3=Decimal("0.025"),
        ),
        "slurry": FertilizerDetail(
            p_id_catalogue="slurry",
            p_type="manure",
            p_n_rt=Decimal(4),
            p_nh4_rt=Decimal(2),
        ),
    }


@pytest.fixture
def sandy_soil_analysis():
    """Soil analysis on dry sand with all required parameters."""
    return SoilAnalysis(
        a_id="soil_1",
        b_sampling_date=date(2024, 3, 1),
        a_c_of=Decimal(20),
        a_cn_fr=Decimal(12),
        a_density_sa=Decimal("1.3"),
        a_n_rt=Decimal(1600),
        a_som_loi=Decimal(4),
        b_soiltype_agr="dekzand",
        b_gwl_class="VII",
    )


@pytest.fixture
def slurry_application():
    """Broadcast slurry application in spring."""
    return FertilizerApplication(
        p_app_id="app_1",
        p_id_catalogue="slurry",
        p_app_amount=Decimal(25000),
        p_app_method="broadcasting",
        p_app_date=date(2025, 3, 15),
        p_name="Dairy slurry",
    )


@pytest.fixture
def balance_input(year_2025, sandy_soil_analysis, slurry_application, cultivation_details, fertilizer_details):
    """Two-field farm: one field with a complete soil analysis, one without."""
    return NitrogenBalanceInput(
        fields=[
            make_field_input(
                "field_ok", 2, soil_analyses=[sandy_soil_analysis], applications=[slurry_application]
            ),
            make_field_input("field_no_soil", 1),
        ],
        fertilizer_details=list(fertilizer_details.values()),
        cultivation_details=list(cultivation_details.values()),
        time_frame=year_2025,
    )
