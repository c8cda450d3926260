"""Input domain models for the nitrogen balance and norm-filling calculations.

These models represent the agronomic records supplied by the data layer as
immutable value objects. Quantities are held as Decimal; pydantic converts
ints, floats and numeric strings on construction.

Units follow the catalogue conventions:
- areas in hectares
- fertilizer and crop nitrogen contents in g N per kg product
- application amounts and yields in kg per hectare
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TimeFrame(BaseModel):
    """Evaluation window, both ends inclusive.

    Attributes:
        start: First day of the window
        end: Last day of the window
    """

    model_config = ConfigDict(frozen=True)

    start: date = Field(description="First day of the evaluation window")
    end: date = Field(description="Last day of the evaluation window")

    @model_validator(mode="after")
    def check_order(self) -> "TimeFrame":
        if self.end < self.start:
            msg = f"Time frame end {self.end} is before start {self.start}"
            raise ValueError(msg)
        return self

    @classmethod
    def clamped(cls, start: date, end: date) -> "TimeFrame":
        """Build a frame, collapsing an inverted interval to an empty one at start."""
        if end < start:
            end = start
        return cls(start=start, end=end)

    def intersect(self, start: date | None, end: date | None) -> "TimeFrame":
        """Intersect with an optionally open-ended interval.

        Args:
            start: Interval start (None = open)
            end: Interval end (None = open)

        Returns:
            The overlapping frame, clamped to start == end when the
            intervals do not overlap
        """
        new_start = max(self.start, start) if start is not None else self.start
        new_end = min(self.end, end) if end is not None else self.end
        return TimeFrame.clamped(new_start, new_end)


class FieldDetails(BaseModel):
    """A farmed land parcel.

    Attributes:
        b_id: Field ID
        b_area: Area in hectares
        b_centroid: (longitude, latitude) of the field centroid
        b_start: Start of the field's active management interval
        b_end: End of the active interval (None = ongoing)
    """

    model_config = ConfigDict(frozen=True)

    b_id: str = Field(description="Field ID")
    b_area: Decimal = Field(default=Decimal(0), ge=0, description="Area in hectares")
    b_centroid: tuple[float, float] | None = Field(
        default=None, description="Centroid as (longitude, latitude)"
    )
    b_start: date | None = Field(default=None, description="Start of active interval")
    b_end: date | None = Field(default=None, description="End of active interval")


class Cultivation(BaseModel):
    """One crop grown on a field over a start/end interval."""

    model_config = ConfigDict(frozen=True)

    b_lu: str = Field(description="Cultivation ID")
    b_lu_catalogue: str = Field(description="Crop catalogue reference")
    b_lu_start: date = Field(description="Sowing or start date")
    b_lu_end: date | None = Field(default=None, description="Termination date (None = ongoing)")
    m_cropresidue: bool | None = Field(
        default=None, description="Whether crop residues are left on the field"
    )
    b_lu_name: str | None = Field(default=None, description="Crop name")
    b_lu_croprotation: str | None = Field(default=None, description="Crop rotation category")

    def is_active_on(self, day: date) -> bool:
        """Check whether the cultivation covers the given day."""
        if day < self.b_lu_start:
            return False
        return self.b_lu_end is None or day <= self.b_lu_end


class HarvestAnalysis(BaseModel):
    """Measured yield and nitrogen content of one harvest."""

    model_config = ConfigDict(frozen=True)

    b_lu_yield: Decimal | None = Field(default=None, ge=0, description="Dry matter yield (kg/ha)")
    b_lu_n_harvestable: Decimal | None = Field(
        default=None, ge=0, description="Nitrogen content of harvested product (g N/kg)"
    )


class Harvest(BaseModel):
    """A harvest event belonging to a cultivation."""

    model_config = ConfigDict(frozen=True)

    b_id_harvesting: str = Field(description="Harvest ID")
    b_lu: str = Field(description="ID of the harvested cultivation")
    b_lu_harvest_date: date | None = Field(default=None, description="Harvest date")
    analyses: list[HarvestAnalysis] = Field(
        default_factory=list, description="Analyses of the harvested product"
    )

    def first_measured_yield(self) -> Decimal | None:
        """Yield of the first analysis that reports one."""
        for analysis in self.analyses:
            if analysis.b_lu_yield is not None:
                return analysis.b_lu_yield
        return None


class FertilizerApplication(BaseModel):
    """A single fertilizer application on a field."""

    model_config = ConfigDict(frozen=True)

    p_app_id: str = Field(description="Application ID")
    p_id_catalogue: str = Field(description="Fertilizer catalogue reference")
    p_app_amount: Decimal | None = Field(
        default=None, ge=0, description="Applied amount (kg product/ha)"
    )
    p_app_method: str | None = Field(default=None, description="Application method")
    p_app_date: date = Field(description="Application date")
    p_name: str | None = Field(default=None, description="Fertilizer name")


class SoilAnalysis(BaseModel):
    """A soil sample analysis; any parameter may be missing."""

    model_config = ConfigDict(frozen=True)

    a_id: str = Field(description="Analysis ID")
    b_sampling_date: date | None = Field(default=None, description="Sampling date")
    a_c_of: Decimal | None = Field(default=None, description="Organic carbon (g C/kg)")
    a_cn_fr: Decimal | None = Field(default=None, description="Carbon to nitrogen ratio")
    a_density_sa: Decimal | None = Field(default=None, description="Bulk density (g/cm3)")
    a_n_rt: Decimal | None = Field(default=None, description="Total nitrogen (mg N/kg)")
    a_som_loi: Decimal | None = Field(default=None, description="Organic matter (%)")
    b_soiltype_agr: str | None = Field(default=None, description="Agricultural soil type code")
    b_gwl_class: str | None = Field(default=None, description="Groundwater level class code")


class SoilAnalysisPicked(BaseModel):
    """Representative soil record combined from a field's analyses."""

    model_config = ConfigDict(frozen=True)

    b_soiltype_agr: str
    b_gwl_class: str
    a_n_rt: Decimal
    a_c_of: Decimal
    a_cn_fr: Decimal
    a_density_sa: Decimal
    a_som_loi: Decimal | None = None


class FieldInput(BaseModel):
    """Snapshot of everything recorded for one field."""

    model_config = ConfigDict(frozen=True)

    field: FieldDetails
    cultivations: list[Cultivation] = Field(default_factory=list)
    harvests: list[Harvest] = Field(default_factory=list)
    soil_analyses: list[SoilAnalysis] = Field(default_factory=list)
    fertilizer_applications: list[FertilizerApplication] = Field(default_factory=list)


class CultivationDetail(BaseModel):
    """Crop catalogue record.

    Attributes:
        b_lu_catalogue: Catalogue key
        b_lu_croprotation: Crop rotation category (grass, cereal, maize, ...)
        b_lu_yield: Default dry matter yield (kg/ha)
        b_lu_hi: Harvest index (fraction of biomass harvested)
        b_lu_n_harvestable: Nitrogen in harvested product (g N/kg)
        b_lu_n_residue: Nitrogen in crop residues (g N/kg)
        b_n_fixation: Biological nitrogen fixation (kg N/ha)
    """

    model_config = ConfigDict(frozen=True)

    b_lu_catalogue: str
    b_lu_croprotation: str | None = None
    b_lu_yield: Decimal | None = None
    b_lu_hi: Decimal | None = None
    b_lu_n_harvestable: Decimal | None = None
    b_lu_n_residue: Decimal | None = None
    b_n_fixation: Decimal | None = None


class FertilizerDetail(BaseModel):
    """Fertilizer catalogue record used by the nitrogen balance.

    Attributes:
        p_id_catalogue: Catalogue key
        p_type: Category (mineral, manure, compost, other)
        p_n_rt: Total nitrogen (g N/kg)
        p_no3_rt: Nitrate nitrogen (g N/kg)
        p_nh4_rt: Ammonium nitrogen (g N/kg)
        p_s_rt: Sulphur (g SO3/kg)
        p_ef_nh3: Ammonia emission factor (fraction), overrides the composition formula
        p_n_wc: Nitrogen working coefficient (fraction, None = 1)
    """

    model_config = ConfigDict(frozen=True)

    p_id_catalogue: str
    p_type: str | None = None
    p_n_rt: Decimal | None = None
    p_no3_rt: Decimal | None = None
    p_nh4_rt: Decimal | None = None
    p_s_rt: Decimal | None = None
    p_ef_nh3: Decimal | None = None
    p_n_wc: Decimal | None = None


class NitrogenBalanceInput(BaseModel):
    """Everything needed to compute a farm's nitrogen balance."""

    model_config = ConfigDict(frozen=True)

    fields: list[FieldInput] = Field(default_factory=list)
    fertilizer_details: list[FertilizerDetail] = Field(default_factory=list)
    cultivation_details: list[CultivationDetail] = Field(default_factory=list)
    time_frame: TimeFrame


class NormFertilizer(BaseModel):
    """Fertilizer record as seen by the usage-norm rules.

    Attributes:
        p_id_catalogue: Catalogue key
        p_type_rvo: RVO fertilizer type code
        p_n_rt: Total nitrogen (g N/kg), falls back to the RVO default
        p_p_rt: Phosphate (g P2O5/kg), falls back to the RVO default
    """

    model_config = ConfigDict(frozen=True)

    p_id_catalogue: str
    p_type_rvo: str | None = None
    p_n_rt: Decimal | None = None
    p_p_rt: Decimal | None = None


class NormFillingInput(BaseModel):
    """Applications on one field and the context the norm rules need.

    Attributes:
        applications: Fertilizer applications to evaluate
        fertilizers: Fertilizers referenced by the applications
        cultivations: Cultivations on the field (arable-land check)
        phosphate_norm: Phosphate usage norm of the field (kg P2O5)
        has_organic_certification: Farm holds organic certification (None = config default)
        has_grazing_intention: Farm intends to graze livestock
        region: Soil region of the field (klei, veen, zand_nwc, zand_zuid, loess)
    """

    model_config = ConfigDict(frozen=True)

    applications: list[FertilizerApplication] = Field(default_factory=list)
    fertilizers: list[NormFertilizer] = Field(default_factory=list)
    cultivations: list[Cultivation] = Field(default_factory=list)
    phosphate_norm: Decimal = Field(default=Decimal(0), ge=0)
    has_organic_certification: bool | None = None
    has_grazing_intention: bool = False
    region: str | None = None
