"""Configuration and constants for the nutrient calculation engine.

This module defines the fixed conversion factors and the tunable settings
for the nitrogen balance pipeline, the norm-filling engine and the
calculation cache.

Includes configuration for:
- Nitrogen balance pipeline (BalanceConfig with NB_ prefix)
- Norm filling (NormFillingConfig with NORM_ prefix)
- Calculation cache (CacheConfig with CACHE_ prefix)

Configuration can be overridden via:
1. Environment variables (e.g., NB_BATCH_SIZE=25, NORM_ORGANIC_RICH_THRESHOLD_KG=15)
2. .env file in the current directory
3. Default values in code
"""

from dataclasses import dataclass
from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class PhysicalConstants:
    """Fixed conversion factors used by the calculators.

    These are NOT configurable - they are unit conversions and regulatory
    reference periods that must not vary between deployments.

    All attributes are immutable (frozen=True prevents modification).
    """

    # Regulatory reference year used to prorate yearly values
    DAYS_PER_YEAR: Decimal = Decimal(365)
    DAYS_PER_LEAP_YEAR: Decimal = Decimal(366)

    # Unit conversion factors
    GRAMS_PER_KILOGRAM: Decimal = Decimal(1000)
    PERCENT: Decimal = Decimal(100)

    # Grassland check window for mineralisation (month, day)
    GRASSLAND_WINDOW_START: tuple[int, int] = (5, 15)
    GRASSLAND_WINDOW_END: tuple[int, int] = (7, 15)


# Module-level singleton for physical constants
CONSTANTS = PhysicalConstants()


class BalanceConfig(BaseSettings):
    """Configuration for the nitrogen balance pipeline.

    Can be overridden via environment variables with NB_ prefix:
    - NB_BATCH_SIZE
    - NB_MAX_WORKERS
    - NB_CALCULATOR_VERSION
    - NB_OUTPUT_DECIMAL_PLACES

    Attributes:
        batch_size: Number of fields evaluated concurrently per chunk
        max_workers: Thread count per chunk (None = one per field in the chunk)
        calculator_version: Version string mixed into calculation cache keys
        output_decimal_places: Rounding applied at the numeric output boundary
    """

    model_config = SettingsConfigDict(
        env_prefix="NB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    batch_size: int = Field(default=50, ge=1, description="Fields evaluated per chunk")
    max_workers: int | None = Field(
        default=None, description="Threads per chunk (None = one per field in the chunk)"
    )
    calculator_version: str = Field(
        default="2025.1", description="Version string used in calculation cache keys"
    )
    output_decimal_places: int = Field(
        default=0, ge=0, description="Decimal places kept when converting results to numbers"
    )

    @field_validator("calculator_version")
    @classmethod
    def validate_calculator_version(cls, v: str) -> str:
        """Reject empty version strings, they would collide across releases."""
        if not v or not v.strip():
            msg = "calculator_version must be a non-empty string"
            raise ValueError(msg)
        return v.strip()


class NormFillingConfig(BaseSettings):
    """Business rules for filling the statutory usage norms.

    Can be overridden via environment variables with NORM_ prefix:
    - NORM_ORGANIC_RICH_THRESHOLD_KG
    - NORM_ORGANIC_CERTIFIED_DEFAULT

    Attributes:
        organic_rich_threshold_kg: Minimum organic-rich phosphate (kg) before
            any discount is granted
        organic_certified_default: Organic certification assumed when the
            caller does not state it
    """

    model_config = SettingsConfigDict(
        env_prefix="NORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    organic_rich_threshold_kg: Decimal = Field(
        default=Decimal(20),
        ge=0,
        description="Organic-rich phosphate needed before the discount applies (kg)",
    )
    organic_certified_default: bool = Field(
        default=False, description="Organic certification assumed when not supplied"
    )


class CacheConfig(BaseSettings):
    """Calculation cache behaviour.

    Can be overridden via environment variables with CACHE_ prefix:
    - CACHE_ENABLED
    - CACHE_MAX_ENTRIES
    """

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Use the calculation cache")
    max_entries: int | None = Field(
        default=None, ge=1, description="Capacity of the in-memory store (None = unbounded)"
    )


DEFAULT_CONFIG = BalanceConfig()
