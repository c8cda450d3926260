"""Static reference tables for the nitrogen balance and usage norms.

Every regulatory decision table lives here as data so that a change of
coefficients never touches control flow. The calculators only perform
lookups against these structures.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from nutrient_engine.models.enums import CropType, GroundwaterClass, LandType, SoilClass

# ---------------------------------------------------------------------------
# Soil
# ---------------------------------------------------------------------------

# Soil types that use the sandy bulk density formula
SANDY_DENSITY_SOILS: frozenset[str] = frozenset({"dekzand", "dalgrond", "duinzand", "loess"})

# Soil classes for the nitrogen balance target
TARGET_SOIL_CLASSES: dict[str, SoilClass] = {
    "dekzand": SoilClass.SAND,
    "dalgrond": SoilClass.SAND,
    "duinzand": SoilClass.SAND,
    "loess": SoilClass.SAND,
    "moerige_klei": SoilClass.CLAY,
    "rivierklei": SoilClass.CLAY,
    "zeeklei": SoilClass.CLAY,
    "maasklei": SoilClass.CLAY,
    "veen": SoilClass.CLAY,
}

_DRY_GWL = ("VI", "VIo", "VId", "VII", "VIIo", "VIId", "VIII", "VIIIo", "VIIId",
            "sVI", "sVII", "bVI", "bVII")
_AVERAGE_GWL = ("IV", "IVu", "IVc", "V", "Va", "Vao", "Vad", "Vb", "Vbo", "Vbd", "sV", "sVb")
_WET_GWL = ("I", "Ia", "Ic", "II", "IIa", "IIb", "IIc", "III", "IIIa", "IIIb")

GROUNDWATER_CLASSES: dict[str, GroundwaterClass] = {
    **{code: GroundwaterClass.DRY for code in _DRY_GWL},
    **{code: GroundwaterClass.AVERAGE for code in _AVERAGE_GWL},
    **{code: GroundwaterClass.WET for code in _WET_GWL},
}

# ---------------------------------------------------------------------------
# Nitrogen balance target (kg N/ha/year)
# ---------------------------------------------------------------------------

# Keyed by (crop type, soil class, groundwater class)
TARGET_VALUES: dict[tuple[CropType, SoilClass, GroundwaterClass], Decimal] = {
    (CropType.GRASSLAND, SoilClass.SAND, GroundwaterClass.DRY): Decimal(80),
    (CropType.GRASSLAND, SoilClass.SAND, GroundwaterClass.AVERAGE): Decimal(125),
    (CropType.GRASSLAND, SoilClass.SAND, GroundwaterClass.WET): Decimal(125),
    (CropType.GRASSLAND, SoilClass.CLAY, GroundwaterClass.DRY): Decimal(125),
    (CropType.GRASSLAND, SoilClass.CLAY, GroundwaterClass.AVERAGE): Decimal(125),
    (CropType.GRASSLAND, SoilClass.CLAY, GroundwaterClass.WET): Decimal(125),
    (CropType.ARABLE, SoilClass.SAND, GroundwaterClass.DRY): Decimal(50),
    (CropType.ARABLE, SoilClass.SAND, GroundwaterClass.AVERAGE): Decimal(70),
    (CropType.ARABLE, SoilClass.SAND, GroundwaterClass.WET): Decimal(125),
    (CropType.ARABLE, SoilClass.CLAY, GroundwaterClass.DRY): Decimal(115),
    (CropType.ARABLE, SoilClass.CLAY, GroundwaterClass.AVERAGE): Decimal(125),
    (CropType.ARABLE, SoilClass.CLAY, GroundwaterClass.WET): Decimal(125),
}

# ---------------------------------------------------------------------------
# Mineralisation defaults (kg N/ha/year)
# ---------------------------------------------------------------------------

# (soil type, grassland) -> yearly mineralisation; soil types not listed supply 0
MINERALIZATION_DEFAULTS: dict[tuple[str, bool], Decimal] = {
    ("dalgrond", True): Decimal(20),
    ("dalgrond", False): Decimal(20),
    ("veen", True): Decimal(160),
    ("veen", False): Decimal(20),
}

# ---------------------------------------------------------------------------
# Ammonia emission
# ---------------------------------------------------------------------------

GRASSLAND_ROTATIONS: frozenset[str] = frozenset({"grass", "clover"})
CROPLAND_ROTATIONS: frozenset[str] = frozenset({
    "potato", "rapeseed", "starch", "maize", "cereal",
    "sugarbeet", "catchcrop", "alfalfa", "nature", "other",
})
# Crop codes that leave the soil bare even though they carry a rotation
BARE_SOIL_CROP_CODES: frozenset[str] = frozenset({
    "nl_6794", "nl_662", "nl_6798", "nl_2300", "nl_3802", "nl_3801",
})


def _factors(grassland: str, cropland: str, bare_soil: str) -> dict[LandType, Decimal]:
    return {
        LandType.GRASSLAND: Decimal(grassland),
        LandType.CROPLAND: Decimal(cropland),
        LandType.BARE_SOIL: Decimal(bare_soil),
    }


# Fraction of ammonium nitrogen volatilised per application method and land type
# (NEMA 2019-2022 emission factors)
AMMONIA_EMISSION_FACTORS: dict[str, dict[LandType, Decimal]] = {
    "slotted coulter": _factors("0.17", "0.24", "0.24"),
    "incorporation": _factors("0.17", "0.22", "0.46"),
    "incorporation 2 tracks": _factors("0.17", "0.46", "0.46"),
    "injection": _factors("0.17", "0.24", "0.02"),
    "shallow injection": _factors("0.17", "0.24", "0.24"),
    "spraying": _factors("0.68", "0.69", "0.69"),
    "broadcasting": _factors("0.68", "0.69", "0.69"),
    "spoke wheel": _factors("0.17", "0.24", "0.24"),
    "pocket placement": _factors("0.68", "0.69", "0.69"),
    "narrowband": _factors("0.17", "0.36", "0.36"),
}

# Coefficients of the mineral fertilizer emission factor formula
MINERAL_EF_N_ORG = Decimal("7.021e-5")
MINERAL_EF_NO3_S = Decimal("-4.308e-5")
MINERAL_EF_NH4 = Decimal("2.498e-4")

# ---------------------------------------------------------------------------
# Nitrate leaching fractions of a positive balance
# ---------------------------------------------------------------------------

CLAY_LEACHING_SOILS: frozenset[str] = frozenset({"zeeklei", "rivierklei", "maasklei", "moerige_klei"})
SANDY_LEACHING_SOILS: frozenset[str] = frozenset({"dekzand", "dalgrond", "duinzand"})

NITRATE_LEACHING_PEAT: dict[LandType, Decimal] = {
    LandType.GRASSLAND: Decimal("0.06"),
    LandType.CROPLAND: Decimal("0.17"),
}
NITRATE_LEACHING_CLAY: dict[LandType, Decimal] = {
    LandType.GRASSLAND: Decimal("0.11"),
    LandType.CROPLAND: Decimal("0.33"),
}
NITRATE_LEACHING_LOESS: dict[LandType, Decimal] = {
    LandType.GRASSLAND: Decimal("0.14"),
    LandType.CROPLAND: Decimal("0.74"),
}

_SANDY_LEACHING_GROUPS: list[tuple[tuple[str, ...], str, str]] = [
    (("I", "Ia", "Ic", "II", "IIa", "IIb", "IIc"), "0.02", "0.04"),
    (("III", "IIIa"), "0.03", "0.07"),
    (("IIIb",), "0.1", "0.28"),
    (("IV", "IVu", "IVc"), "0.14", "0.38"),
    (("V", "Va", "Vao", "Vad", "Vb", "Vbo", "Vbd", "sV", "sVb"), "0.16", "0.44"),
    (("VI", "VIo", "VId", "sVI", "bVI"), "0.21", "0.58"),
    (("VII", "VIIo", "VIId", "sVII", "bVII"), "0.27", "0.74"),
    (("VIII", "VIIIo", "VIIId"), "0.32", "0.89"),
]

NITRATE_LEACHING_SAND: dict[str, dict[LandType, Decimal]] = {
    code: {LandType.GRASSLAND: Decimal(grass), LandType.CROPLAND: Decimal(crop)}
    for codes, grass, crop in _SANDY_LEACHING_GROUPS
    for code in codes
}

# ---------------------------------------------------------------------------
# RVO fertilizer types (manure codes)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RvoFertilizerType:
    """Default composition and regulatory status of an RVO fertilizer type.

    Attributes:
        code: RVO type code
        description: Fertilizer type name
        p_n_rt: Default nitrogen content (kg N/ton)
        p_p_rt: Default phosphate content (kg P2O5/ton), None when not set
        nitrates_directive: Counts towards the animal manure nitrogen norm
    """

    code: str
    description: str
    p_n_rt: Decimal
    p_p_rt: Decimal | None
    nitrates_directive: bool


def _rvo(code: str, description: str, n: str, p: str | None, relevant: bool = True):
    return RvoFertilizerType(code, description, Decimal(n), Decimal(p) if p else None, relevant)


RVO_FERTILIZER_TYPES: dict[str, RvoFertilizerType] = {
    entry.code: entry
    for entry in (
        _rvo("10", "Solid manure, cattle", "6.4", "3.5"),
        _rvo("11", "Solid manure, veal calves", "7.3", "5.2"),
        _rvo("12", "Filtrate after manure separation", "4.0", "0.5"),
        _rvo("13", "Urine, cattle", "4.0", "0.2"),
        _rvo("14", "Slurry, dairy cattle", "4.0", "1.5"),
        _rvo("17", "Thin fraction after manure processing", "3.1", "0.6"),
        _rvo("18", "Slurry, veal calves", "3.6", "1.5"),
        _rvo("19", "Slurry, white veal calves", "3.0", "0.8"),
        _rvo("25", "Solid manure, horses and ponies", "4.5", "2.9"),
        _rvo("26", "Solid manure, sheep", "8.6", "5.6"),
        _rvo("27", "Solid manure, goats", "8.7", "5.5"),
        _rvo("30", "Slurry, rabbits", "5.8", "4.7"),
        _rvo("31", "Solid manure, laying hens", "18.1", "11.7"),
        _rvo("32", "Dried manure, laying hens", "24.6", "20.8"),
        _rvo("33", "Solid manure, broilers", "26.4", "13.4"),
        _rvo("35", "Solid manure, turkeys", "22.3", "16.3"),
        _rvo("39", "Solid manure, ducks", "7.9", "6.1"),
        _rvo("40", "Solid manure, pigs", "8.2", "6.4"),
        _rvo("41", "Urine, pigs", "4.7", "0.2"),
        _rvo("42", "Thin fraction, pigs", "5.6", "0.9"),
        _rvo("43", "Solid fraction, pigs", "10.7", "11.6"),
        _rvo("46", "Slurry, sows", "4.0", "2.5"),
        _rvo("50", "Slurry, fattening pigs", "6.7", "3.5"),
        _rvo("56", "Solid manure, deep litter cattle", "6.4", "3.4"),
        _rvo("60", "Slurry, beef cattle", "4.1", "1.6"),
        _rvo("61", "Solid manure, beef cattle", "6.7", "3.9"),
        _rvo("75", "Solid manure, mink", "14.2", "21.1"),
        _rvo("76", "Slurry, other animals", "5.8", "4.7"),
        _rvo("80", "Solid manure, fur animals", "13.4", "18.7"),
        _rvo("81", "Slurry, deer", "5.5", "3.1"),
        _rvo("90", "Solid manure, other animals", "6.8", "5.4"),
        _rvo("104", "Solid manure, guinea pigs", "8.4", "5.7"),
        _rvo("107", "Processed manure with phosphate declaration", "3.5", "3.1"),
        _rvo("108", "Processed manure without phosphate declaration", "3.5", None),
        _rvo("110", "Spent mushroom compost", "7.4", "3.4", relevant=False),
        _rvo("111", "Compost", "5.4", "2.9", relevant=False),
        _rvo("112", "Very clean compost", "5.4", "2.9", relevant=False),
        _rvo("113", "Sewage sludge", "9.7", "9.7", relevant=False),
        _rvo("114", "Sewage sludge, composted", "8.0", "8.5", relevant=False),
        _rvo("115", "Mineral fertilizer", "0", None, relevant=False),
        _rvo("116", "Other organic fertilizer", "0", None, relevant=False),
        _rvo("117", "Spent mushroom substrate", "7.4", "3.4", relevant=False),
        _rvo("120", "Mineral concentrate", "7.0", "0.2"),
    )
}

# ---------------------------------------------------------------------------
# Organic-rich fertilizer phosphate discount
# ---------------------------------------------------------------------------

# RVO codes -> fraction of phosphate counted against the norm
ORGANIC_RICH_DISCOUNT_FACTORS: dict[str, Decimal] = {
    "111": Decimal("0.25"),
    "112": Decimal("0.25"),
    "110": Decimal("0.75"),
    "10": Decimal("0.75"),
    "61": Decimal("0.75"),
    "25": Decimal("0.75"),
    "56": Decimal("0.75"),
}
# Only organic-rich when the farm holds organic certification
ORGANIC_CERTIFIED_DISCOUNT_FACTORS: dict[str, Decimal] = {
    "40": Decimal("0.75"),
}

# ---------------------------------------------------------------------------
# Nitrogen working coefficients
# ---------------------------------------------------------------------------

# Cultivations that are not arable land (permanent and temporary grassland)
NON_ARABLE_CROP_CODES: frozenset[str] = frozenset({"nl_265", "nl_266", "nl_331", "nl_332"})

CLAY_AND_PEAT_REGIONS: frozenset[str] = frozenset({"klei", "veen"})
SAND_AND_LOESS_REGIONS: frozenset[str] = frozenset({"zand_nwc", "zand_zuid", "loess"})


@dataclass(frozen=True)
class WorkingCoefficientCondition:
    """A conditional working coefficient inside a rule.

    Every attribute left as None matches any application.
    """

    description: str
    coefficient: Decimal
    grazing_intention: bool | None = None
    regions: frozenset[str] | None = None
    arable_land: bool | None = None
    autumn_winter_only: bool = False


@dataclass(frozen=True)
class WorkingCoefficientRule:
    """Working coefficient for a group of RVO fertilizer types."""

    description: str
    rvo_codes: frozenset[str]
    coefficient: Decimal | None = None
    on_farm_produced: bool | None = None
    conditions: tuple[WorkingCoefficientCondition, ...] = field(default_factory=tuple)


DEFAULT_WORKING_COEFFICIENT = Decimal("1.0")
DEFAULT_WORKING_COEFFICIENT_DESCRIPTION = "Mineral fertilizer"

_GRAZER_SLURRY = frozenset({"14", "60", "18", "19"})
_GRAZER_SOLID = frozenset({"10", "56", "61", "25", "26", "27", "95", "96"})
_AUTUMN_ARABLE_CLAY = WorkingCoefficientCondition(
    description="On arable land on clay and peat, 1 September to 31 January",
    coefficient=Decimal("0.3"),
    regions=CLAY_AND_PEAT_REGIONS,
    arable_land=True,
    autumn_winter_only=True,
)

WORKING_COEFFICIENT_RULES: tuple[WorkingCoefficientRule, ...] = (
    WorkingCoefficientRule(
        description="Slurry from grazing animals produced on the farm",
        rvo_codes=_GRAZER_SLURRY,
        on_farm_produced=True,
        conditions=(
            WorkingCoefficientCondition("Farm with grazing", Decimal("0.45"), grazing_intention=True),
            WorkingCoefficientCondition("Farm without grazing", Decimal("0.6"), grazing_intention=False),
        ),
    ),
    WorkingCoefficientRule(
        description="Slurry from grazing animals supplied",
        rvo_codes=_GRAZER_SLURRY,
        on_farm_produced=False,
        coefficient=Decimal("0.6"),
    ),
    WorkingCoefficientRule(
        description="Slurry from pigs",
        rvo_codes=frozenset({"46", "50"}),
        conditions=(
            WorkingCoefficientCondition("On clay and peat", Decimal("0.6"), regions=CLAY_AND_PEAT_REGIONS),
            WorkingCoefficientCondition("On sand and loess", Decimal("0.8"), regions=SAND_AND_LOESS_REGIONS),
        ),
    ),
    WorkingCoefficientRule(
        description="Slurry from other animals",
        rvo_codes=frozenset({"30", "76", "81", "91", "92"}),
        coefficient=Decimal("0.6"),
    ),
    WorkingCoefficientRule(
        description="Thin fraction after manure processing and urine",
        rvo_codes=frozenset({"12", "17", "41", "42"}),
        coefficient=Decimal("0.8"),
    ),
    WorkingCoefficientRule(
        description="Solid manure from grazing animals produced on the farm",
        rvo_codes=_GRAZER_SOLID,
        on_farm_produced=True,
        conditions=(
            _AUTUMN_ARABLE_CLAY,
            WorkingCoefficientCondition(
                "Other uses on a farm with grazing", Decimal("0.45"), grazing_intention=True
            ),
            WorkingCoefficientCondition(
                "Other uses on a farm without grazing", Decimal("0.6"), grazing_intention=False
            ),
        ),
    ),
    WorkingCoefficientRule(
        description="Solid manure from grazing animals supplied",
        rvo_codes=_GRAZER_SOLID,
        on_farm_produced=False,
        conditions=(
            _AUTUMN_ARABLE_CLAY,
            WorkingCoefficientCondition("Other uses", Decimal("0.4")),
        ),
    ),
    WorkingCoefficientRule(
        description="Solid manure from pigs, poultry and mink",
        rvo_codes=frozenset({
            "23", "31", "32", "33", "35", "39", "40", "43", "75",
            "80", "97", "98", "99", "100", "101",
        }),
        coefficient=Decimal("0.55"),
    ),
    WorkingCoefficientRule(
        description="Solid manure from other animals",
        rvo_codes=frozenset({
            "11", "13", "24", "30", "76", "81", "90", "91", "92",
            "102", "103", "104", "105", "106",
        }),
        conditions=(
            _AUTUMN_ARABLE_CLAY,
            WorkingCoefficientCondition("Other uses", Decimal("0.4")),
        ),
    ),
    WorkingCoefficientRule("Compost", frozenset({"111", "112"}), coefficient=Decimal("0.1")),
    WorkingCoefficientRule("Spent mushroom compost", frozenset({"110", "117"}), coefficient=Decimal("0.25")),
    WorkingCoefficientRule("Sewage sludge", frozenset({"113", "114"}), coefficient=Decimal("0.4")),
    WorkingCoefficientRule("Other organic fertilizers", frozenset({"116"}), coefficient=Decimal("0.5")),
    WorkingCoefficientRule("Mineral concentrate", frozenset({"120"}), coefficient=Decimal("1")),
)
