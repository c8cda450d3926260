"""Unit tests for nitrogen supply calculations."""

from datetime import date
from decimal import Decimal

import pytest

from nutrient_engine.calculators.supply import (
    calculate_mineralization_minip,
    calculate_nitrogen_fixation,
    calculate_nitrogen_supply,
    calculate_nitrogen_supply_by_fertilizers,
    calculate_nitrogen_supply_by_mineralization,
)
from nutrient_engine.errors import CalculationError
from nutrient_engine.models import (
    Cultivation,
    CultivationDetail,
    FertilizerDetail,
    SoilAnalysisPicked,
    TimeFrame,
)
from nutrient_engine.models.results import NitrogenSupplyDeposition
from tests.utils import make_application


def _soil(b_soiltype_agr: str) -> SoilAnalysisPicked:
    return SoilAnalysisPicked(
        b_soiltype_agr=b_soiltype_agr,
        b_gwl_class="VII",
        a_n_rt=Decimal(1600),
        a_c_of=Decimal(20),
        a_cn_fr=Decimal(12),
        a_density_sa=Decimal("1.3"),
    )


@pytest.fixture
def grass():
    return Cultivation(
        b_lu="grass_1",
        b_lu_catalogue="nl_265",
        b_lu_start=date(2020, 1, 1),
        b_lu_end=None,
    )


class TestFertilizerSupply:
    """Tests for nitrogen supplied by fertilizer applications."""

    def test_grouped_by_fertilizer_type(self, fertilizer_details):
        applications = [
            make_application("app_1", "slurry", 25000),
            make_application("app_2", "can", 300),
        ]

        supply = calculate_nitrogen_supply_by_fertilizers(applications, fertilizer_details)

        assert supply.manure.total == Decimal(100)  # 25000 * 4 / 1000
        assert supply.mineral.total == Decimal(81)  # 300 * 270 / 1000
        assert supply.compost.total == 0
        assert supply.total == Decimal(181)
        assert [a.id for a in supply.manure.applications] == ["app_1"]

    def test_working_coefficient_applied(self):
        details = {
            "compost": FertilizerDetail(
                p_id_catalogue="compost", p_type="compost", p_n_rt=Decimal(6), p_n_wc=Decimal("0.5")
            )
        }

        supply = calculate_nitrogen_supply_by_fertilizers(
            [make_application("app_1", "compost", 10000)], details
        )

        assert supply.compost.total == Decimal(30)  # 10000 * 6 * 0.5 / 1000

    def test_unknown_fertilizer_type_is_other(self):
        details = {"x": FertilizerDetail(p_id_catalogue="x", p_type="biochar", p_n_rt=Decimal(2))}

        supply = calculate_nitrogen_supply_by_fertilizers(
            [make_application("app_1", "x", 1000)], details
        )

        assert supply.other.total == Decimal(2)

    def test_missing_fertilizer_detail(self, fertilizer_details):
        with pytest.raises(CalculationError, match="app_9 has no fertilizerDetails"):
            calculate_nitrogen_supply_by_fertilizers(
                [make_application("app_9", "unknown", 1000)], fertilizer_details
            )


class TestFixation:
    """Tests for biological nitrogen fixation."""

    def test_catalogue_value_per_cultivation(self):
        details = {
            "clover": CultivationDetail(
                b_lu_catalogue="clover", b_lu_croprotation="clover", b_n_fixation=Decimal(150)
            )
        }
        cultivation = Cultivation(b_lu="lu_1", b_lu_catalogue="clover", b_lu_start=date(2025, 1, 1))

        fixation = calculate_nitrogen_fixation([cultivation], details)

        assert fixation.total == Decimal(150)
        assert fixation.cultivations[0].id == "lu_1"

    def test_missing_cultivation_detail(self, cultivation_details):
        cultivation = Cultivation(b_lu="lu_1", b_lu_catalogue="nl_9999", b_lu_start=date(2025, 1, 1))

        with pytest.raises(CalculationError, match="lu_1 has no corresponding cultivation"):
            calculate_nitrogen_fixation([cultivation], cultivation_details)


class TestMineralization:
    """Tests for mineralisation of soil organic matter."""

    def test_dalgrond_full_year(self, grass, cultivation_details, year_2025):
        result = calculate_nitrogen_supply_by_mineralization(
            [grass], _soil("dalgrond"), cultivation_details, year_2025
        )

        # 20 * 364 / 365: the end day is not counted
        assert len(result.years) == 1
        assert float(result.total) == pytest.approx(20 * 364 / 365)

    def test_peat_under_grassland(self, grass, cultivation_details, year_2025):
        result = calculate_nitrogen_supply_by_mineralization(
            [grass], _soil("veen"), cultivation_details, year_2025
        )

        assert float(result.total) == pytest.approx(160 * 364 / 365)

    def test_peat_without_grassland(self, cultivation_details, year_2025):
        potato = Cultivation(b_lu="lu_1", b_lu_catalogue="nl_2014", b_lu_start=date(2025, 4, 1))

        result = calculate_nitrogen_supply_by_mineralization(
            [potato], _soil("veen"), cultivation_details, year_2025
        )

        assert float(result.total) == pytest.approx(20 * 364 / 365)

    def test_other_soils_supply_nothing(self, grass, cultivation_details, year_2025):
        result = calculate_nitrogen_supply_by_mineralization(
            [grass], _soil("dekzand"), cultivation_details, year_2025
        )

        assert result.total == 0

    def test_split_over_leap_year(self, grass, cultivation_details):
        time_frame = TimeFrame(start=date(2024, 7, 1), end=date(2025, 6, 30))

        result = calculate_nitrogen_supply_by_mineralization(
            [grass], _soil("dalgrond"), cultivation_details, time_frame
        )

        assert [y.year for y in result.years] == [2024, 2025]
        assert float(result.years[0].value) == pytest.approx(20 * 184 / 366)
        assert float(result.years[1].value) == pytest.approx(20 * 180 / 365)

    def test_minip_positive_for_typical_soil(self):
        value = calculate_mineralization_minip(Decimal(20), Decimal(12), Decimal("1.3"))

        assert value > 0

    def test_minip_requires_inputs(self):
        with pytest.raises(CalculationError, match="No a_c_of value"):
            calculate_mineralization_minip(None, Decimal(12), Decimal("1.3"))

    def test_minip_temperature_too_high(self):
        with pytest.raises(CalculationError, match="too high"):
            calculate_mineralization_minip(
                Decimal(20), Decimal(12), Decimal("1.3"), mean_temperature=Decimal(30)
            )


class TestNitrogenSupply:
    """Tests for the combined supply."""

    def test_total_includes_deposition(self, grass, fertilizer_details, cultivation_details, year_2025):
        supply = calculate_nitrogen_supply(
            [make_application("app_1", "slurry", 25000)],
            [grass],
            _soil("dekzand"),
            fertilizer_details,
            cultivation_details,
            NitrogenSupplyDeposition(total=Decimal(20)),
            year_2025,
        )

        assert supply.total == Decimal(120)  # 100 slurry + 20 deposition
        assert supply.deposition.total == Decimal(20)

    def test_errors_are_wrapped(self, grass, cultivation_details, year_2025):
        with pytest.raises(CalculationError, match="^Failed to calculate nitrogen supply: "):
            calculate_nitrogen_supply(
                [make_application("app_1", "slurry", 25000)],
                [grass],
                _soil("dekzand"),
                {},
                cultivation_details,
                NitrogenSupplyDeposition(),
                year_2025,
            )
