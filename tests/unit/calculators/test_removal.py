"""Unit tests for nitrogen removal via harvests and residues."""

from datetime import date
from decimal import Decimal

import pytest

from nutrient_engine.calculators.removal import (
    calculate_nitrogen_removal,
    calculate_nitrogen_removal_by_harvests,
    calculate_nitrogen_removal_by_residues,
)
from nutrient_engine.errors import CalculationError
from nutrient_engine.models import Cultivation, Harvest, HarvestAnalysis


@pytest.fixture
def potato():
    return Cultivation(
        b_lu="potato_1",
        b_lu_catalogue="nl_2014",
        b_lu_start=date(2025, 4, 1),
        b_lu_end=date(2025, 9, 30),
        m_cropresidue=True,
    )


class TestHarvestRemoval:
    """Tests for nitrogen exported with harvested products."""

    def test_measured_values(self, potato, cultivation_details):
        harvest = Harvest(
            b_id_harvesting="h_1",
            b_lu="potato_1",
            analyses=[HarvestAnalysis(b_lu_yield=Decimal(10000), b_lu_n_harvestable=Decimal(30))],
        )

        removal = calculate_nitrogen_removal_by_harvests([potato], [harvest], cultivation_details)

        assert removal.total == Decimal(-300)  # -(10000 * 30 / 1000)
        assert removal.harvests[0].id == "h_1"

    def test_catalogue_defaults_fill_missing_values(self, potato, cultivation_details):
        harvest = Harvest(b_id_harvesting="h_1", b_lu="potato_1", analyses=[HarvestAnalysis()])

        removal = calculate_nitrogen_removal_by_harvests([potato], [harvest], cultivation_details)

        assert removal.total == Decimal(-180)  # -(12000 * 15 / 1000)

    def test_analyses_are_averaged(self, potato, cultivation_details):
        harvest = Harvest(
            b_id_harvesting="h_1",
            b_lu="potato_1",
            analyses=[
                HarvestAnalysis(b_lu_yield=Decimal(10000), b_lu_n_harvestable=Decimal(10)),
                HarvestAnalysis(b_lu_yield=Decimal(10000), b_lu_n_harvestable=Decimal(20)),
            ],
        )

        removal = calculate_nitrogen_removal_by_harvests([potato], [harvest], cultivation_details)

        assert removal.total == Decimal(-150)

    def test_harvest_of_unknown_cultivation(self, potato, cultivation_details):
        harvest = Harvest(b_id_harvesting="h_1", b_lu="other", analyses=[HarvestAnalysis()])

        with pytest.raises(CalculationError, match="Harvest h_1"):
            calculate_nitrogen_removal_by_harvests([potato], [harvest], cultivation_details)


class TestResidueRemoval:
    """Tests for nitrogen left in crop residues."""

    def test_residues_from_catalogue_yield(self, potato, cultivation_details):
        removal = calculate_nitrogen_removal_by_residues([potato], [], cultivation_details)

        # -(12000 / 0.5) * (1 - 0.5) * 10 / 1000
        assert removal.total == Decimal(-120)

    def test_residues_from_measured_yield(self, potato, cultivation_details):
        harvest = Harvest(
            b_id_harvesting="h_1",
            b_lu="potato_1",
            analyses=[HarvestAnalysis(b_lu_yield=Decimal(8000))],
        )

        removal = calculate_nitrogen_removal_by_residues([potato], [harvest], cultivation_details)

        assert removal.total == Decimal(-80)  # -(8000 / 0.5) * 0.5 * 10 / 1000

    def test_residues_removed_from_field(self, potato, cultivation_details):
        removed = potato.model_copy(update={"m_cropresidue": False})

        removal = calculate_nitrogen_removal_by_residues([removed], [], cultivation_details)

        assert removal.total == 0


class TestNitrogenRemoval:
    """Tests for the combined removal."""

    def test_total(self, potato, cultivation_details):
        removal = calculate_nitrogen_removal([potato], [], cultivation_details)

        assert removal.total == removal.harvests.total + removal.residues.total

    def test_errors_are_wrapped(self, cultivation_details):
        unknown = Cultivation(b_lu="lu_x", b_lu_catalogue="nl_9999", b_lu_start=date(2025, 1, 1))

        with pytest.raises(CalculationError, match="^Failed to calculate nitrogen removal: "):
            calculate_nitrogen_removal([unknown], [], cultivation_details)
