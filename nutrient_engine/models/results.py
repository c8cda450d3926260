"""Result models for the nitrogen balance and norm filling.

Field-level results keep a breakdown per contributing entity (application,
cultivation, harvest or year) next to every total. Removal and emission
values are negative: they are added to supply to form the balance.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

_ZERO = Decimal(0)


class EntityValue(BaseModel):
    """Contribution of one application, cultivation or harvest."""

    model_config = ConfigDict(frozen=True)

    id: str
    value: Decimal


class ApplicationGroup(BaseModel):
    """Total and per-application values for one fertilizer category."""

    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    applications: list[EntityValue] = Field(default_factory=list)


class FertilizerBreakdown(BaseModel):
    """Values per fertilizer category (used for both supply and ammonia)."""

    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    mineral: ApplicationGroup = Field(default_factory=ApplicationGroup)
    manure: ApplicationGroup = Field(default_factory=ApplicationGroup)
    compost: ApplicationGroup = Field(default_factory=ApplicationGroup)
    other: ApplicationGroup = Field(default_factory=ApplicationGroup)


class CultivationBreakdown(BaseModel):
    """Total and per-cultivation values."""

    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    cultivations: list[EntityValue] = Field(default_factory=list)


class HarvestBreakdown(BaseModel):
    """Total and per-harvest values."""

    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    harvests: list[EntityValue] = Field(default_factory=list)


class MineralizationYear(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    value: Decimal


class NitrogenSupplyMineralization(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    years: list[MineralizationYear] = Field(default_factory=list)


class NitrogenSupplyDeposition(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO


class NitrogenSupply(BaseModel):
    """Nitrogen entering the field (kg N/ha)."""

    model_config = ConfigDict(frozen=True)

    total: Decimal
    fertilizers: FertilizerBreakdown
    fixation: CultivationBreakdown
    deposition: NitrogenSupplyDeposition
    mineralisation: NitrogenSupplyMineralization


class NitrogenRemoval(BaseModel):
    """Nitrogen leaving the field via harvests and residues (kg N/ha, negative)."""

    model_config = ConfigDict(frozen=True)

    total: Decimal
    harvests: HarvestBreakdown
    residues: CultivationBreakdown


class NitrogenEmissionAmmonia(BaseModel):
    """Ammonia volatilisation (kg N/ha, negative)."""

    model_config = ConfigDict(frozen=True)

    total: Decimal
    fertilizers: FertilizerBreakdown
    residues: CultivationBreakdown


class NitrogenEmissionNitrate(BaseModel):
    """Nitrate leaching (kg N/ha, negative)."""

    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO


class NitrogenEmission(BaseModel):
    """All nitrogen emissions; total covers ammonia and nitrate."""

    model_config = ConfigDict(frozen=True)

    total: Decimal
    ammonia: NitrogenEmissionAmmonia
    nitrate: NitrogenEmissionNitrate


class NitrogenBalanceField(BaseModel):
    """Nitrogen balance of one field (kg N/ha).

    ``balance`` is supply + removal + ammonia emission; nitrate is reported
    alongside but derived from that balance.
    """

    model_config = ConfigDict(frozen=True)

    b_id: str
    balance: Decimal
    supply: NitrogenSupply
    removal: NitrogenRemoval
    emission: NitrogenEmission
    target: Decimal


class FieldBalanceSuccess(BaseModel):
    """A field whose balance was calculated."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    b_id: str
    b_area: Decimal
    balance: NitrogenBalanceField


class FieldBalanceFailure(BaseModel):
    """A field whose balance could not be calculated."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    b_id: str
    b_area: Decimal
    error_message: str


FieldBalanceResult = FieldBalanceSuccess | FieldBalanceFailure


class FarmFertilizerTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    mineral: Decimal = _ZERO
    manure: Decimal = _ZERO
    compost: Decimal = _ZERO
    other: Decimal = _ZERO


class FarmSupply(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    fertilizers: FarmFertilizerTotals = Field(default_factory=FarmFertilizerTotals)
    fixation: Decimal = _ZERO
    deposition: Decimal = _ZERO
    mineralisation: Decimal = _ZERO


class FarmRemoval(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    harvests: Decimal = _ZERO
    residues: Decimal = _ZERO


class FarmAmmonia(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    fertilizers: FarmFertilizerTotals = Field(default_factory=FarmFertilizerTotals)
    residues: Decimal = _ZERO


class FarmEmission(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal = _ZERO
    ammonia: FarmAmmonia = Field(default_factory=FarmAmmonia)
    nitrate: Decimal = _ZERO


class NitrogenBalance(BaseModel):
    """Farm-level nitrogen balance as area-weighted averages (kg N/ha).

    Attributes:
        balance: Average supply + removal + ammonia emission
        supply: Average supply breakdown
        removal: Average removal breakdown
        emission: Average emission breakdown
        target: Average target
        fields: Per-field results in input order
        has_errors: True when at least one field failed
        field_error_messages: Messages of the failed fields
    """

    model_config = ConfigDict(frozen=True)

    balance: Decimal = _ZERO
    supply: FarmSupply = Field(default_factory=FarmSupply)
    removal: FarmRemoval = Field(default_factory=FarmRemoval)
    emission: FarmEmission = Field(default_factory=FarmEmission)
    target: Decimal = _ZERO
    fields: list[FieldBalanceResult] = Field(default_factory=list)
    has_errors: bool = False
    field_error_messages: list[str] = Field(default_factory=list)


class ApplicationFilling(BaseModel):
    """Contribution of one application to a usage norm (kg)."""

    model_config = ConfigDict(frozen=True)

    p_app_id: str
    norm_filling: Decimal
    norm_filling_details: str | None = None


class NormFilling(BaseModel):
    """How a set of applications fills a usage norm (kg)."""

    model_config = ConfigDict(frozen=True)

    norm_filling: Decimal = _ZERO
    application_filling: list[ApplicationFilling] = Field(default_factory=list)
