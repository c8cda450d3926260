"""Farm nitrogen balance pipeline: field calculation, deposition, batching and aggregation."""

from nutrient_engine.balance.aggregation import aggregate_field_balances_to_farm
from nutrient_engine.balance.batching import chunked, evaluate_in_chunks
from nutrient_engine.balance.deposition import (
    DepositionSource,
    StaticDepositionSource,
    calculate_deposition_by_field,
)
from nutrient_engine.balance.field import BalanceContext, calculate_field_balance

__all__ = [
    "BalanceContext",
    "calculate_field_balance",
    "DepositionSource",
    "StaticDepositionSource",
    "calculate_deposition_by_field",
    "chunked",
    "evaluate_in_chunks",
    "aggregate_field_balances_to_farm",
]
