"""Nitrogen balance and usage-norm filling calculations for agricultural fields."""

from nutrient_engine.balance import DepositionSource, StaticDepositionSource
from nutrient_engine.cache import CacheStore, InMemoryCacheStore
from nutrient_engine.runner import (
    NORM_FILLING_TYPES,
    NitrogenBalanceCalculator,
    calculate_nitrogen_balance,
    calculate_norm_filling,
)

__all__ = [
    "NitrogenBalanceCalculator",
    "calculate_nitrogen_balance",
    "calculate_norm_filling",
    "NORM_FILLING_TYPES",
    "DepositionSource",
    "StaticDepositionSource",
    "CacheStore",
    "InMemoryCacheStore",
]
