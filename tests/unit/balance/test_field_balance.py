"""Unit tests for the single-field nitrogen balance."""

from datetime import date
from decimal import Decimal

import pytest

from nutrient_engine.balance.field import BalanceContext, calculate_field_balance
from nutrient_engine.errors import UnknownSoilTypeError
from nutrient_engine.models import NitrogenBalanceInput
from nutrient_engine.models.results import (
    FieldBalanceFailure,
    FieldBalanceSuccess,
    NitrogenSupplyDeposition,
)
from tests.utils import make_application, make_field_input


@pytest.fixture
def context(balance_input):
    return BalanceContext.from_input(balance_input)


@pytest.fixture
def deposition():
    return NitrogenSupplyDeposition(total=Decimal(20))


class TestBalanceContext:
    """Tests for catalogue indexing."""

    def test_catalogues_indexed_by_key(self, balance_input):
        context = BalanceContext.from_input(balance_input)

        assert set(context.fertilizer_details) == {"can", "slurry"}
        assert set(context.cultivation_details) == {"nl_265", "nl_2014"}
        assert context.time_frame == balance_input.time_frame


class TestCalculateFieldBalance:
    """Tests for calculate_field_balance."""

    def test_successful_field(self, balance_input, context, deposition):
        result = calculate_field_balance(balance_input.fields[0], context, deposition)

        assert isinstance(result, FieldBalanceSuccess)
        assert result.status == "success"
        assert result.b_area == Decimal(2)

        balance = result.balance
        # supply: 25000 * 4 / 1000 slurry + 20 deposition (no mineralisation on dekzand)
        assert balance.supply.total == Decimal(120)
        # removal: -(10000 * 30 / 1000)
        assert balance.removal.total == Decimal(-300)
        # ammonia: -(25000 * 2 * 0.68 / 1000) on grassland
        assert balance.emission.ammonia.total == Decimal(-34)
        assert balance.balance == Decimal(-214)
        # no surplus, so no nitrate leaching
        assert balance.emission.nitrate.total == 0
        # grassland on dry sand over a calendar year
        assert balance.target == Decimal(80)

    def test_balance_excludes_nitrate(self, sandy_soil_analysis, context, deposition):
        field_input = make_field_input(
            "rich",
            soil_analyses=[sandy_soil_analysis],
            applications=[make_application("app_1", "slurry", 125000)],
        )

        result = calculate_field_balance(field_input, context, deposition)

        balance = result.balance
        # supply 500 + 20, removal -300, ammonia -170
        assert balance.balance == Decimal(50)
        # surplus 50 on sandy grassland with GWL VII
        assert balance.emission.nitrate.total == Decimal("-13.5")
        assert balance.emission.total == Decimal("-183.5")

    def test_field_without_soil_data_fails(self, balance_input, context, deposition):
        result = calculate_field_balance(balance_input.fields[1], context, deposition)

        assert isinstance(result, FieldBalanceFailure)
        assert result.status == "failure"
        assert result.b_id == "field_no_soil"
        assert result.b_area == Decimal(1)
        assert result.error_message.startswith("Missing required soil parameters")

    def test_missing_deposition_fails(self, balance_input, context):
        result = calculate_field_balance(balance_input.fields[0], context, None)

        assert isinstance(result, FieldBalanceFailure)
        assert result.error_message == "Deposition data not found for field field_ok"

    def test_wrapper_prefixes_are_stripped(self, sandy_soil_analysis, context, deposition):
        field_input = make_field_input(
            "bad_app",
            soil_analyses=[sandy_soil_analysis],
            applications=[make_application("app_9", "unknown", 1000)],
        )

        result = calculate_field_balance(field_input, context, deposition)

        assert isinstance(result, FieldBalanceFailure)
        assert result.error_message == "Fertilizer application app_9 has no fertilizerDetails"

    def test_unknown_soil_type_propagates(self, sandy_soil_analysis, context, deposition):
        gravel = sandy_soil_analysis.model_copy(update={"b_soiltype_agr": "gravel"})
        field_input = make_field_input("gravel", soil_analyses=[gravel])

        with pytest.raises(UnknownSoilTypeError):
            calculate_field_balance(field_input, context, deposition)

    def test_field_local_time_frame(self, sandy_soil_analysis, context, deposition):
        field_input = make_field_input("late", soil_analyses=[sandy_soil_analysis])
        field_input = field_input.model_copy(
            update={"field": field_input.field.model_copy(update={"b_start": date(2025, 7, 1)})}
        )

        result = calculate_field_balance(field_input, context, deposition)

        # 2025-07-01 to 2025-12-31 is 183 days apart: 80 * 184 / 365
        assert result.balance.target == Decimal(80) * 184 / Decimal(365)

    def test_input_not_mutated(self, balance_input, context, deposition):
        field_input = balance_input.fields[0]
        before = field_input.model_dump()

        calculate_field_balance(field_input, context, deposition)

        assert field_input.model_dump() == before


def test_empty_catalogues_make_every_field_fail(balance_input, deposition):
    empty = NitrogenBalanceInput(fields=balance_input.fields, time_frame=balance_input.time_frame)
    context = BalanceContext.from_input(empty)

    result = calculate_field_balance(balance_input.fields[0], context, deposition)

    assert isinstance(result, FieldBalanceFailure)
