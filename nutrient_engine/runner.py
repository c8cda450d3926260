"""Calculation entry points.

This module wires the field calculator, deposition lookup, chunked
evaluation, farm aggregation and the calculation cache into the two public
operations: the farm nitrogen balance and the filling of a usage norm.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from nutrient_engine.balance import (
    BalanceContext,
    DepositionSource,
    aggregate_field_balances_to_farm,
    calculate_deposition_by_field,
    calculate_field_balance,
    evaluate_in_chunks,
)
from nutrient_engine.cache import CacheStore, InMemoryCacheStore, with_calculation_cache
from nutrient_engine.common.tracing import calculation_context
from nutrient_engine.config import BalanceConfig, CacheConfig
from nutrient_engine.errors import StructuralDataError
from nutrient_engine.models.domain import FieldInput, NitrogenBalanceInput, NormFillingInput
from nutrient_engine.models.enums import NormType
from nutrient_engine.models.results import (
    FieldBalanceFailure,
    FieldBalanceResult,
    NitrogenBalance,
    NormFilling,
)
from nutrient_engine.norms import (
    calculate_manure_nitrogen_filling,
    calculate_nitrogen_usage_filling,
    calculate_phosphate_filling,
)
from nutrient_engine.numeric import to_numeric

logger = logging.getLogger(__name__)


class NitrogenBalanceCalculator:
    """Farm nitrogen balance with an optional result cache.

    Args:
        deposition_source: Provider of yearly deposition rates
        cache_store: Store for finished results. When omitted an in-memory
            store is created if caching is enabled.
        config: Pipeline settings (default: BalanceConfig())
        cache_config: Cache settings (default: CacheConfig())
    """

    FUNCTION_NAME = "calculate_nitrogen_balance"

    def __init__(
        self,
        deposition_source: DepositionSource,
        cache_store: CacheStore | None = None,
        config: BalanceConfig | None = None,
        cache_config: CacheConfig | None = None,
    ):
        self.deposition_source = deposition_source
        self.config = config or BalanceConfig()
        cache_config = cache_config or CacheConfig()

        if cache_store is None and cache_config.enabled:
            cache_store = InMemoryCacheStore(max_entries=cache_config.max_entries)
        self.cache_store = cache_store
        self._cached_calculate = with_calculation_cache(
            self.calculate_decimal, self.FUNCTION_NAME, self.config.calculator_version
        )

    def calculate(self, balance_input: NitrogenBalanceInput) -> dict[str, Any]:
        """Calculate the farm balance and return it as plain numbers.

        The Decimal balance is served from the cache when the same input was
        calculated before with the same calculator version; rounding to
        output_decimal_places happens after the lookup.
        """
        if self.cache_store is None:
            balance = self.calculate_decimal(balance_input)
        else:
            balance = self._cached_calculate(self.cache_store, balance_input)
        return to_numeric(balance, self.config.output_decimal_places)

    def calculate_decimal(self, balance_input: NitrogenBalanceInput) -> NitrogenBalance:
        """Calculate the farm balance keeping Decimal precision.

        Steps:
            1. Index the fertilizer and cultivation catalogues
            2. Fetch deposition for all fields in one call
            3. Calculate the fields in chunks, concurrently within a chunk
            4. Aggregate the field results to farm level

        Args:
            balance_input: Fields, catalogues and time frame

        Returns:
            Farm balance with the per-field results in input order

        Raises:
            StructuralDataError: If a field refers to an unknown soil type or
                groundwater class
        """
        with calculation_context(self.FUNCTION_NAME):
            fields = balance_input.fields
            logger.info(f"Calculating nitrogen balance for {len(fields)} field(s)")
            t_start = time.perf_counter()

            context = BalanceContext.from_input(balance_input)

            t0 = time.perf_counter()
            deposition = calculate_deposition_by_field(
                [f.field for f in fields], balance_input.time_frame, self.deposition_source
            )
            logger.info(f"[timing] Deposition lookup took {time.perf_counter() - t0:.3f}s")

            def evaluate(field_input: FieldInput) -> FieldBalanceResult:
                return calculate_field_balance(
                    field_input, context, deposition.get(field_input.field.b_id)
                )

            t0 = time.perf_counter()
            results = evaluate_in_chunks(
                fields,
                evaluate,
                chunk_size=self.config.batch_size,
                max_workers=self.config.max_workers,
            )
            logger.info(f"[timing] Field calculations took {time.perf_counter() - t0:.3f}s")

            error_messages = [
                r.error_message for r in results if isinstance(r, FieldBalanceFailure)
            ]
            farm = aggregate_field_balances_to_farm(
                results,
                fields,
                has_errors=bool(error_messages),
                field_error_messages=error_messages,
            )

            if farm.has_errors:
                logger.warning(f"Nitrogen balance completed with {len(error_messages)} failed field(s)")
            logger.info(
                f"[timing] Nitrogen balance took {time.perf_counter() - t_start:.3f}s"
            )
            return farm


def calculate_nitrogen_balance(
    balance_input: NitrogenBalanceInput,
    deposition_source: DepositionSource,
    cache_store: CacheStore | None = None,
    config: BalanceConfig | None = None,
) -> dict[str, Any]:
    """Calculate the farm nitrogen balance as plain numbers.

    Convenience wrapper around NitrogenBalanceCalculator. Without a
    cache_store the result is calculated without caching.
    """
    calculator = NitrogenBalanceCalculator(
        deposition_source,
        cache_store=cache_store,
        config=config,
        cache_config=CacheConfig(enabled=cache_store is not None),
    )
    return calculator.calculate(balance_input)


NORM_FILLING_TYPES: dict[NormType, Callable[[NormFillingInput], NormFilling]] = {
    NormType.MANURE: calculate_manure_nitrogen_filling,
    NormType.NITROGEN: calculate_nitrogen_usage_filling,
    NormType.PHOSPHATE: calculate_phosphate_filling,
}


def calculate_norm_filling(
    norm_type: NormType | str,
    filling_input: NormFillingInput,
    cache_store: CacheStore | None = None,
    config: BalanceConfig | None = None,
) -> NormFilling:
    """Calculate how a field's applications fill one usage norm.

    Args:
        norm_type: Norm identifier ("manure", "nitrogen" or "phosphate")
        filling_input: Applications, fertilizers and field context
        cache_store: Optional store for finished results
        config: Provides the calculator version for cache keys

    Returns:
        Total filling and the contribution per application, kept as Decimal.
        Callers convert with ``to_numeric`` at their output boundary.

    Raises:
        KeyError: If the norm type is not registered
        StructuralDataError: If a fertilizer is missing or has an invalid RVO type
        ValueError: If the calculation fails for another reason
    """
    try:
        norm = NormType(norm_type)
    except ValueError:
        norm = None

    filling_function = NORM_FILLING_TYPES.get(norm) if norm else None
    if filling_function is None:
        msg = f"Norm type {norm_type} not supported"
        raise KeyError(msg)

    config = config or BalanceConfig()
    function_name = f"calculate_{norm.value}_norm_filling"

    with calculation_context(function_name):
        logger.info(
            f"Calculating {norm.value} norm filling for "
            f"{len(filling_input.applications)} application(s)"
        )
        t0 = time.perf_counter()
        try:
            if cache_store is None:
                filling = filling_function(filling_input)
            else:
                cached = with_calculation_cache(
                    filling_function, function_name, config.calculator_version
                )
                filling = cached(cache_store, filling_input)
        except StructuralDataError:
            raise
        except Exception as e:
            logger.error(f"Norm filling {norm.value} failed: {e}")
            msg = f"Norm filling '{norm.value}' failed"
            raise ValueError(msg) from e

        logger.info(f"[timing] {norm.value} norm filling took {time.perf_counter() - t0:.3f}s")
        return filling
