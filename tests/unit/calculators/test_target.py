"""Unit tests for the nitrogen balance target."""

from datetime import date
from decimal import Decimal

import pytest

from nutrient_engine.calculators.target import (
    calculate_target_for_nitrogen_balance,
    classify_groundwater,
    classify_soil,
)
from nutrient_engine.errors import (
    StructuralDataError,
    UnknownGroundwaterClassError,
    UnknownSoilTypeError,
)
from nutrient_engine.models import Cultivation, SoilAnalysisPicked, TimeFrame
from nutrient_engine.models.enums import GroundwaterClass, SoilClass


def _soil(b_soiltype_agr: str, b_gwl_class: str) -> SoilAnalysisPicked:
    return SoilAnalysisPicked(
        b_soiltype_agr=b_soiltype_agr,
        b_gwl_class=b_gwl_class,
        a_n_rt=Decimal(1600),
        a_c_of=Decimal(20),
        a_cn_fr=Decimal(12),
        a_density_sa=Decimal("1.3"),
    )


def _cultivation(b_lu_catalogue: str) -> Cultivation:
    return Cultivation(b_lu="lu_1", b_lu_catalogue=b_lu_catalogue, b_lu_start=date(2025, 1, 1))


class TestClassification:
    """Tests for soil and groundwater classification."""

    def test_soil_classes(self):
        assert classify_soil("dekzand") is SoilClass.SAND
        assert classify_soil("loess") is SoilClass.SAND
        assert classify_soil("veen") is SoilClass.CLAY
        assert classify_soil("moerige_klei") is SoilClass.CLAY

    def test_unknown_soil_type_is_structural(self):
        with pytest.raises(UnknownSoilTypeError, match="Unknown soil type: gravel"):
            classify_soil("gravel")

        assert issubclass(UnknownSoilTypeError, StructuralDataError)

    def test_groundwater_classes(self):
        assert classify_groundwater("VII") is GroundwaterClass.DRY
        assert classify_groundwater("sVb") is GroundwaterClass.AVERAGE
        assert classify_groundwater("IIIb") is GroundwaterClass.WET

    def test_unknown_groundwater_class(self):
        with pytest.raises(UnknownGroundwaterClassError, match="Unknown groundwater class: -"):
            classify_groundwater("-")


class TestTarget:
    """Tests for the target table and prorating."""

    @pytest.mark.parametrize(
        "crop, soil, gwl, expected",
        [
            ("nl_265", "dekzand", "VII", 80),
            ("nl_265", "zeeklei", "II", 125),
            ("nl_2014", "dekzand", "VII", 50),
            ("nl_2014", "dekzand", "V", 70),
            ("nl_2014", "dekzand", "II", 125),
            ("nl_2014", "zeeklei", "VII", 115),
            ("nl_2014", "zeeklei", "V", 125),
        ],
    )
    def test_full_year_equals_base_value(
        self, crop, soil, gwl, expected, cultivation_details, year_2025
    ):
        target = calculate_target_for_nitrogen_balance(
            [_cultivation(crop)], _soil(soil, gwl), cultivation_details, year_2025
        )

        assert target == Decimal(expected)

    def test_prorated_window(self, cultivation_details):
        # 2025-01-01 to 2025-07-02 is 182 days apart: 80 * 183 / 365
        time_frame = TimeFrame(start=date(2025, 1, 1), end=date(2025, 7, 2))

        target = calculate_target_for_nitrogen_balance(
            [_cultivation("nl_265")], _soil("dekzand", "VII"), cultivation_details, time_frame
        )

        assert float(target) == pytest.approx(40.11, abs=0.01)

    def test_single_day(self, cultivation_details):
        time_frame = TimeFrame(start=date(2025, 6, 1), end=date(2025, 6, 1))

        target = calculate_target_for_nitrogen_balance(
            [_cultivation("nl_265")], _soil("dekzand", "VII"), cultivation_details, time_frame
        )

        assert target == Decimal(80) / Decimal(365)

    def test_without_cultivations_is_arable(self, cultivation_details, year_2025):
        target = calculate_target_for_nitrogen_balance(
            [], _soil("dekzand", "VII"), cultivation_details, year_2025
        )

        assert target == Decimal(50)
