"""Unit tests for calculation context and log record enrichment."""

import logging

from nutrient_engine.common.log_utils import CalculationContextFilter
from nutrient_engine.common.tracing import (
    calculation_context,
    ctx_calculation_id,
    ctx_calculation_name,
)


def make_record():
    return logging.LogRecord("test", logging.INFO, __file__, 1, "message", None, None)


class TestCalculationContext:
    """Tests for calculation_context."""

    def test_sets_and_resets(self):
        with calculation_context("calculate_nitrogen_balance", "abc123") as calculation_id:
            assert calculation_id == "abc123"
            assert ctx_calculation_id.get() == "abc123"
            assert ctx_calculation_name.get() == "calculate_nitrogen_balance"

        assert ctx_calculation_id.get() == ""
        assert ctx_calculation_name.get() == ""

    def test_generates_id(self):
        with calculation_context("calculate_manure_norm_filling") as calculation_id:
            assert len(calculation_id) == 12

    def test_nested_restores_outer(self):
        with calculation_context("outer", "1"):
            with calculation_context("inner", "2"):
                assert ctx_calculation_id.get() == "2"
            assert ctx_calculation_id.get() == "1"
            assert ctx_calculation_name.get() == "outer"


class TestCalculationContextFilter:
    """Tests for CalculationContextFilter."""

    def test_adds_context_to_record(self):
        record = make_record()

        with calculation_context("calculate_nitrogen_balance", "abc123"):
            assert CalculationContextFilter().filter(record) is True

        assert record.calculation_id == "abc123"
        assert record.calculation == "calculate_nitrogen_balance"

    def test_empty_outside_calculation(self):
        record = make_record()

        CalculationContextFilter().filter(record)

        assert record.calculation_id == ""
        assert record.calculation == ""
