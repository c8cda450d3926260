"""Error definitions for the calculation engine.

Two tiers of failure exist:

- ``StructuralDataError`` and its subclasses signal malformed reference data
  shared by every field (unknown soil or groundwater codes, unknown RVO
  fertilizer types, fertilizers missing from the catalogue). They always
  propagate out of the invocation.
- ``CalculationError`` signals a problem confined to one field's records.
  The field boundary converts it (and any other non-structural exception)
  into a failure result.
"""

import re


class CalculationError(Exception):
    """A field-local calculation failure."""


class MissingSoilParametersError(CalculationError):
    """Combined soil analyses lack a parameter the balance needs."""


class StructuralDataError(ValueError):
    """Reference data is malformed in a way no field can recover from."""


class UnknownSoilTypeError(StructuralDataError):
    """Soil type code is not in the fixed membership tables."""


class UnknownGroundwaterClassError(StructuralDataError):
    """Groundwater class code is not in the fixed membership tables."""


class FertilizerNotFoundError(StructuralDataError):
    """An application references a fertilizer absent from the catalogue."""


class UnknownFertilizerTypeError(StructuralDataError):
    """A fertilizer has no RVO type, or one the tables do not know."""


_WRAPPER_PREFIXES = re.compile(
    r"^(?:(?:Error|CalculationError|ValueError): |Failed to calculate nitrogen \w+: )+"
)


def strip_error_prefixes(message: str) -> str:
    """Remove generic wrapper prefixes from an error message.

    Nested sub-calculations prefix their messages (for example
    ``"Failed to calculate nitrogen supply: "``); the field result only keeps
    the underlying reason.

    Args:
        message: Raw exception message

    Returns:
        Message without leading wrapper prefixes
    """
    return _WRAPPER_PREFIXES.sub("", message).strip()
