"""Nitrogen balance calculators.

This package contains pure functions for the components of a field's
nitrogen balance. All calculators are stateless and work on Decimal values;
catalogue lookups are passed in as prebuilt dictionaries.
"""

from nutrient_engine.calculators.emission import (
    calculate_nitrate_emission,
    calculate_nitrogen_emission,
    determine_nitrate_leaching_factor,
)
from nutrient_engine.calculators.removal import calculate_nitrogen_removal
from nutrient_engine.calculators.soil import combine_soil_analyses
from nutrient_engine.calculators.supply import (
    calculate_mineralization_minip,
    calculate_nitrogen_supply,
)
from nutrient_engine.calculators.target import calculate_target_for_nitrogen_balance

__all__ = [
    "combine_soil_analyses",
    "calculate_nitrogen_supply",
    "calculate_mineralization_minip",
    "calculate_nitrogen_removal",
    "calculate_nitrogen_emission",
    "calculate_nitrate_emission",
    "determine_nitrate_leaching_factor",
    "calculate_target_for_nitrogen_balance",
]
