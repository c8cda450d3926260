"""Unit tests for soil conversions and combination of soil analyses."""

from datetime import date
from decimal import Decimal

import pytest

from nutrient_engine.calculators.soil import (
    calculate_bulk_density,
    calculate_carbon_nitrogen_ratio,
    calculate_organic_carbon,
    calculate_organic_matter,
    combine_soil_analyses,
)
from nutrient_engine.errors import MissingSoilParametersError
from nutrient_engine.models import SoilAnalysis


class TestSoilConversions:
    """Tests for the pedotransfer functions."""

    def test_organic_carbon_from_organic_matter(self):
        assert calculate_organic_carbon(Decimal(4)) == Decimal(20)  # 4 * 0.5 * 10

    def test_organic_carbon_clamped(self):
        assert calculate_organic_carbon(Decimal(200)) == Decimal(600)

    def test_organic_matter_from_organic_carbon(self):
        assert calculate_organic_matter(Decimal(20)) == Decimal(4)  # 20 / 10 / 0.5

    def test_organic_matter_lower_bound(self):
        assert calculate_organic_matter(Decimal("0.1")) == Decimal("0.5")

    def test_carbon_nitrogen_ratio(self):
        # 20 / (1600 / 1000)
        assert calculate_carbon_nitrogen_ratio(Decimal(20), Decimal(1600)) == Decimal("12.5")

    def test_carbon_nitrogen_ratio_missing_input(self):
        assert calculate_carbon_nitrogen_ratio(None, Decimal(1600)) is None
        assert calculate_carbon_nitrogen_ratio(Decimal(20), None) is None

    def test_bulk_density_sandy_soil(self):
        density = calculate_bulk_density(Decimal(4), "dekzand")

        # 1 / (4 * 0.02525 + 0.6541)
        assert float(density) == pytest.approx(1 / 0.7551)

    def test_bulk_density_other_soil(self):
        density = calculate_bulk_density(Decimal(4), "zeeklei")

        expected = 0.00000067 * 4**4 - 0.00007792 * 4**3 + 0.00314712 * 4**2 - 0.06039523 * 4 + 1.33932206
        assert float(density) == pytest.approx(expected)

    def test_bulk_density_without_soil_type(self):
        assert calculate_bulk_density(Decimal(4), None) is None


class TestCombineSoilAnalyses:
    """Tests for combining several soil analyses into one record."""

    def test_most_recent_value_wins_and_gaps_are_estimated(self):
        older = SoilAnalysis(
            a_id="old",
            b_sampling_date=date(2020, 5, 1),
            a_n_rt=Decimal(1600),
            b_soiltype_agr="zeeklei",
            b_gwl_class="VII",
        )
        newer = SoilAnalysis(
            a_id="new",
            b_sampling_date=date(2024, 5, 1),
            a_som_loi=Decimal(4),
            b_soiltype_agr="dekzand",
        )

        picked = combine_soil_analyses([older, newer])

        assert picked.b_soiltype_agr == "dekzand"
        assert picked.b_gwl_class == "VII"
        assert picked.a_n_rt == Decimal(1600)
        assert picked.a_c_of == Decimal(20)
        assert picked.a_cn_fr == Decimal("12.5")
        assert float(picked.a_density_sa) == pytest.approx(1 / 0.7551)

    def test_measured_values_are_not_overwritten(self, sandy_soil_analysis):
        picked = combine_soil_analyses([sandy_soil_analysis])

        assert picked.a_c_of == Decimal(20)
        assert picked.a_cn_fr == Decimal(12)
        assert picked.a_density_sa == Decimal("1.3")

    def test_input_order_is_irrelevant(self, sandy_soil_analysis):
        undated = SoilAnalysis(a_id="undated", b_soiltype_agr="zeeklei")

        first = combine_soil_analyses([undated, sandy_soil_analysis])
        second = combine_soil_analyses([sandy_soil_analysis, undated])

        assert first == second
        assert first.b_soiltype_agr == "dekzand"

    def test_missing_required_parameters(self):
        analysis = SoilAnalysis(a_id="partial", a_som_loi=Decimal(4))

        with pytest.raises(MissingSoilParametersError, match="b_soiltype_agr, a_n_rt"):
            combine_soil_analyses([analysis])

    def test_no_analyses(self):
        with pytest.raises(MissingSoilParametersError, match="Missing required soil parameters"):
            combine_soil_analyses([])
