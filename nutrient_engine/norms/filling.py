"""Filling of the statutory usage norms by fertilizer applications.

Three norms are filled per field:

- Animal manure nitrogen: nitrogen in fertilizers whose RVO type falls under
  the nitrates directive.
- Nitrogen usage: all nitrogen, weighted by the working coefficient of the
  fertilizer type.
- Phosphate usage: all phosphate, with a discount for organic-rich
  fertilizers once enough of them is applied.

Missing fertilizers and unknown RVO types are reference data problems and
raise immediately; they are never downgraded to a zero contribution.
"""

import logging
from datetime import date
from decimal import Decimal

from nutrient_engine.config import CONSTANTS, NormFillingConfig
from nutrient_engine.errors import FertilizerNotFoundError, UnknownFertilizerTypeError
from nutrient_engine.models.domain import (
    Cultivation,
    FertilizerApplication,
    NormFertilizer,
    NormFillingInput,
)
from nutrient_engine.models.results import ApplicationFilling, NormFilling
from nutrient_engine.numeric import ZERO, decimal_sum, to_decimal
from nutrient_engine.tables import (
    DEFAULT_WORKING_COEFFICIENT,
    DEFAULT_WORKING_COEFFICIENT_DESCRIPTION,
    NON_ARABLE_CROP_CODES,
    ORGANIC_CERTIFIED_DISCOUNT_FACTORS,
    ORGANIC_RICH_DISCOUNT_FACTORS,
    RVO_FERTILIZER_TYPES,
    WORKING_COEFFICIENT_RULES,
)

logger = logging.getLogger(__name__)


def _index_fertilizers(fertilizers: list[NormFertilizer]) -> dict[str, NormFertilizer]:
    return {fertilizer.p_id_catalogue: fertilizer for fertilizer in fertilizers}


def _get_fertilizer(
    application: FertilizerApplication, fertilizers: dict[str, NormFertilizer]
) -> NormFertilizer:
    fertilizer = fertilizers.get(application.p_id_catalogue)
    if fertilizer is None:
        msg = (
            f"Fertilizer {application.p_id_catalogue} not found for application "
            f"{application.p_app_id}"
        )
        raise FertilizerNotFoundError(msg)
    return fertilizer


def _nitrogen_content(fertilizer: NormFertilizer, zero_is_unknown: bool = False) -> Decimal:
    """Nitrogen content of the fertilizer, or the RVO default when not measured.

    With ``zero_is_unknown`` a content of 0 is treated as not measured.
    """
    known = fertilizer.p_n_rt is not None and not (zero_is_unknown and fertilizer.p_n_rt == 0)
    if known:
        return fertilizer.p_n_rt
    rvo_type = RVO_FERTILIZER_TYPES.get(fertilizer.p_type_rvo or "")
    return rvo_type.p_n_rt if rvo_type else ZERO


def _phosphate_content(fertilizer: NormFertilizer) -> Decimal:
    """Phosphate content of the fertilizer, or the RVO default, or 0."""
    if fertilizer.p_p_rt is not None:
        return fertilizer.p_p_rt
    rvo_type = RVO_FERTILIZER_TYPES.get(fertilizer.p_type_rvo or "")
    if rvo_type is None or rvo_type.p_p_rt is None:
        return ZERO
    return rvo_type.p_p_rt


def _build_norm_filling(fillings: list[ApplicationFilling]) -> NormFilling:
    return NormFilling(
        norm_filling=decimal_sum(f.norm_filling for f in fillings),
        application_filling=fillings,
    )


def calculate_manure_nitrogen_filling(filling_input: NormFillingInput) -> NormFilling:
    """Calculate how applications fill the animal manure nitrogen norm.

    Formula:
        filling = p_app_amount * p_n_rt / 1000

    Only RVO types relevant to the nitrates directive count; others
    contribute 0. The fertilizer's own p_n_rt is preferred over the RVO
    default for its type.

    Args:
        filling_input: Applications and fertilizers of the field

    Returns:
        Total filling (kg N) and the contribution per application

    Raises:
        FertilizerNotFoundError: If an application's fertilizer is not supplied
        UnknownFertilizerTypeError: If a fertilizer lacks an RVO type or has an unknown one
    """
    fertilizers = _index_fertilizers(filling_input.fertilizers)

    fillings = []
    for application in filling_input.applications:
        fertilizer = _get_fertilizer(application, fertilizers)
        if not fertilizer.p_type_rvo:
            msg = f"Fertilizer {fertilizer.p_id_catalogue} has no p_type_rvo"
            raise UnknownFertilizerTypeError(msg)

        rvo_type = RVO_FERTILIZER_TYPES.get(fertilizer.p_type_rvo)
        if rvo_type is None:
            msg = (
                f"Fertilizer {fertilizer.p_id_catalogue} has unknown p_type_rvo "
                f"{fertilizer.p_type_rvo}"
            )
            raise UnknownFertilizerTypeError(msg)

        if not rvo_type.nitrates_directive:
            filling = ZERO
        else:
            filling = (
                to_decimal(application.p_app_amount)
                * _nitrogen_content(fertilizer)
                / CONSTANTS.GRAMS_PER_KILOGRAM
            )
        fillings.append(ApplicationFilling(p_app_id=application.p_app_id, norm_filling=filling))

    return _build_norm_filling(fillings)


def is_arable_land(cultivations: list[Cultivation], day: date) -> bool:
    """Check whether the field counts as arable land on a given day.

    The first cultivation active on that day decides; without an active
    cultivation, or with a grassland crop code, the field is not arable.
    """
    active = next((c for c in cultivations if c.is_active_on(day)), None)
    return active is not None and active.b_lu_catalogue not in NON_ARABLE_CROP_CODES


def get_working_coefficient(
    p_type_rvo: str | None,
    region: str | None,
    has_grazing_intention: bool,
    arable_land: bool,
    application_date: date,
    on_farm_produced: bool,
) -> tuple[Decimal, str]:
    """Look up the nitrogen working coefficient of a fertilizer application.

    Rules are checked in table order. A rule restricted to on-farm or
    supplied manure is skipped when the origin does not match; within a rule
    the first condition that matches grazing, region, arable land and the
    1 September - 31 January period wins.

    Args:
        p_type_rvo: RVO type of the fertilizer
        region: Soil region of the field
        has_grazing_intention: Farm intends to graze livestock
        arable_land: Field is arable land on the application date
        application_date: Date of application
        on_farm_produced: Manure was produced on the farm itself

    Returns:
        Tuple of (working coefficient, description). Types not in the
        table, and missing types, count as mineral fertilizer (1.0).
    """
    if not p_type_rvo:
        return DEFAULT_WORKING_COEFFICIENT, DEFAULT_WORKING_COEFFICIENT_DESCRIPTION

    in_autumn_winter = application_date.month >= 9 or application_date.month == 1

    for rule in WORKING_COEFFICIENT_RULES:
        if p_type_rvo not in rule.rvo_codes:
            continue
        if rule.on_farm_produced is not None and rule.on_farm_produced != on_farm_produced:
            continue

        if not rule.conditions:
            if rule.coefficient is not None:
                return rule.coefficient, rule.description
            continue

        for condition in rule.conditions:
            if (
                condition.grazing_intention is not None
                and condition.grazing_intention != has_grazing_intention
            ):
                continue
            if condition.regions is not None and region not in condition.regions:
                continue
            if condition.arable_land is not None and condition.arable_land != arable_land:
                continue
            if condition.autumn_winter_only and not in_autumn_winter:
                continue
            return condition.coefficient, f"{rule.description} - {condition.description}"

    return DEFAULT_WORKING_COEFFICIENT, DEFAULT_WORKING_COEFFICIENT_DESCRIPTION


def calculate_nitrogen_usage_filling(filling_input: NormFillingInput) -> NormFilling:
    """Calculate how applications fill the nitrogen usage norm.

    Formula:
        filling = p_app_amount * p_n_rt * working_coefficient / 1000

    Manure is assumed to be produced on the farm when the farm intends to
    graze, and supplied otherwise.
    A nitrogen content of 0 counts as unknown and falls back to the RVO
    default.

    Args:
        filling_input: Applications, fertilizers, cultivations and farm context

    Returns:
        Total filling (kg N) and the contribution per application with the
        applied working coefficient in the details

    Raises:
        FertilizerNotFoundError: If an application's fertilizer is not supplied
    """
    fertilizers = _index_fertilizers(filling_input.fertilizers)

    fillings = []
    for application in filling_input.applications:
        fertilizer = _get_fertilizer(application, fertilizers)
        coefficient, description = get_working_coefficient(
            fertilizer.p_type_rvo,
            filling_input.region,
            filling_input.has_grazing_intention,
            is_arable_land(filling_input.cultivations, application.p_app_date),
            application.p_app_date,
            on_farm_produced=filling_input.has_grazing_intention,
        )
        filling = (
            to_decimal(application.p_app_amount)
            * _nitrogen_content(fertilizer, zero_is_unknown=True)
            * coefficient
            / CONSTANTS.GRAMS_PER_KILOGRAM
        )
        percentage = (coefficient * CONSTANTS.PERCENT).normalize()
        fillings.append(
            ApplicationFilling(
                p_app_id=application.p_app_id,
                norm_filling=filling,
                norm_filling_details=f"Working coefficient: {percentage:f}% - {description}",
            )
        )

    return _build_norm_filling(fillings)


def _discount_factor(p_type_rvo: str | None, has_organic_certification: bool) -> Decimal | None:
    """Fraction counted for an organic-rich fertilizer, None for standard fertilizers."""
    code = p_type_rvo or ""
    if code in ORGANIC_RICH_DISCOUNT_FACTORS:
        return ORGANIC_RICH_DISCOUNT_FACTORS[code]
    if has_organic_certification and code in ORGANIC_CERTIFIED_DISCOUNT_FACTORS:
        return ORGANIC_CERTIFIED_DISCOUNT_FACTORS[code]
    return None


def calculate_phosphate_filling(
    filling_input: NormFillingInput, config: NormFillingConfig | None = None
) -> NormFilling:
    """Calculate how applications fill the phosphate usage norm.

    Standard fertilizers always count at 100%. Organic-rich fertilizers are
    counted at a reduced fraction (25% or 75%) once at least the threshold
    amount of organic-rich phosphate (20 kg by default) is applied. The
    reduction is limited to the field's phosphate norm and is spent on the
    most favourable (25%) fertilizers first:

        remaining = phosphate_norm
        for each organic-rich application, ordered by fraction ascending:
            discountable = min(actual, remaining)
            filling = discountable * fraction + (actual - discountable)
            remaining -= discountable

    Args:
        filling_input: Applications, fertilizers, norm and certification
        config: Norm rules (default: NormFillingConfig())

    Returns:
        Total filling (kg P2O5) and the contribution per application, in
        the input order of the applications

    Raises:
        FertilizerNotFoundError: If an application's fertilizer is not supplied
    """
    config = config or NormFillingConfig()
    certified = filling_input.has_organic_certification
    if certified is None:
        certified = config.organic_certified_default

    fertilizers = _index_fertilizers(filling_input.fertilizers)

    # (index, application, actual phosphate, fraction or None)
    classified: list[tuple[int, FertilizerApplication, Decimal, Decimal | None]] = []
    for index, application in enumerate(filling_input.applications):
        fertilizer = _get_fertilizer(application, fertilizers)
        actual = (
            to_decimal(application.p_app_amount)
            * _phosphate_content(fertilizer)
            / CONSTANTS.GRAMS_PER_KILOGRAM
        )
        classified.append(
            (index, application, actual, _discount_factor(fertilizer.p_type_rvo, certified))
        )

    organic_rich = [entry for entry in classified if entry[3] is not None]
    organic_rich_phosphate = decimal_sum(entry[2] for entry in organic_rich)
    threshold_met = organic_rich_phosphate >= config.organic_rich_threshold_kg
    logger.debug(
        f"Organic-rich phosphate {organic_rich_phosphate} kg, "
        f"threshold {config.organic_rich_threshold_kg} kg met: {threshold_met}"
    )

    fillings: list[ApplicationFilling | None] = [None] * len(classified)

    for index, application, actual, fraction in classified:
        if fraction is None:
            fillings[index] = ApplicationFilling(p_app_id=application.p_app_id, norm_filling=actual)

    if not threshold_met:
        for index, application, actual, _ in organic_rich:
            fillings[index] = ApplicationFilling(
                p_app_id=application.p_app_id,
                norm_filling=actual,
                norm_filling_details=(
                    "Organic-rich fertilizer, minimum threshold not met, counted at 100%."
                ),
            )
    else:
        remaining = filling_input.phosphate_norm
        for index, application, actual, fraction in sorted(organic_rich, key=lambda e: e[3]):
            discountable = min(actual, remaining)
            filling = ZERO
            if discountable > ZERO:
                filling += discountable * fraction
                remaining -= discountable
                percentage = (fraction * CONSTANTS.PERCENT).normalize()
                details = (
                    f"Organic-rich fertilizer (counted at {percentage:f}%) contributes "
                    f"{discountable * fraction:.2f} kg to the norm."
                )
            else:
                discountable = ZERO
                details = "Organic-rich fertilizer, no discount applied."

            beyond_discount = actual - discountable
            if beyond_discount > ZERO:
                filling += beyond_discount
                details += f" Plus {beyond_discount:.2f} kg (counted at 100%) beyond the discount limit."

            fillings[index] = ApplicationFilling(
                p_app_id=application.p_app_id,
                norm_filling=filling,
                norm_filling_details=details,
            )

    return _build_norm_filling([f for f in fillings if f is not None])
