"""Usage norm filling.

Calculates how fertilizer applications fill the statutory manure nitrogen,
nitrogen and phosphate usage norms of a field, and aggregates field norms
and fillings to farm totals.
"""

from nutrient_engine.norms.farm import (
    FieldNormFillings,
    FieldNorms,
    aggregate_norm_fillings_to_farm_level,
    aggregate_norms_to_farm_level,
)
from nutrient_engine.norms.filling import (
    calculate_manure_nitrogen_filling,
    calculate_nitrogen_usage_filling,
    calculate_phosphate_filling,
    get_working_coefficient,
)

__all__ = [
    "calculate_manure_nitrogen_filling",
    "calculate_nitrogen_usage_filling",
    "calculate_phosphate_filling",
    "get_working_coefficient",
    "FieldNorms",
    "FieldNormFillings",
    "aggregate_norms_to_farm_level",
    "aggregate_norm_fillings_to_farm_level",
]
