"""Classification enums used by the calculators and lookup tables."""

from enum import Enum


class FertilizerType(Enum):
    """Catalogue fertilizer categories used to group supply and emission."""

    MINERAL = "mineral"
    MANURE = "manure"
    COMPOST = "compost"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: str | None) -> "FertilizerType":
        """Map a catalogue p_type to a category, unknown or missing codes are OTHER."""
        for member in cls:
            if member.value == code:
                return member
        return cls.OTHER


class LandType(Enum):
    """Land use at the time of a fertilizer application."""

    GRASSLAND = "grassland"
    CROPLAND = "cropland"
    BARE_SOIL = "bare soil"


class CropType(Enum):
    """Crop classification for the nitrogen balance target."""

    GRASSLAND = "grassland"
    ARABLE = "arable"


class SoilClass(Enum):
    """Soil classification for the nitrogen balance target."""

    SAND = "sand"
    CLAY = "clay"


class GroundwaterClass(Enum):
    """Groundwater regime derived from the GWL class code."""

    DRY = "dry"
    AVERAGE = "average"
    WET = "wet"


class NormType(Enum):
    """Statutory usage norms that fertilizer applications can fill."""

    MANURE = "manure"
    NITROGEN = "nitrogen"
    PHOSPHATE = "phosphate"
