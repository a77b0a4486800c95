"""
Parameter Rating Resolver — Raw Values to a Sparse Rating Mapping

Pure function over one datapoint's values. Keys without a rule, with a
blank value, or without a matching band are simply left out.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union

from corrosion_risk.schemas import NormParameter, Parameter, RangeType, RatingRange

from .matcher import UNRATED, Rating, match_rating, parse_bound


@dataclass(frozen=True)
class RatingRule:
    """Rating rule of one parameter under one norm."""
    range_type: RangeType
    rating_ranges: List[RatingRange] = field(default_factory=list)


def infer_range_type(rating_ranges: Iterable[RatingRange]) -> RangeType:
    """Selection when every band's `min` is a non-numeric literal, else range."""
    rating_ranges = list(rating_ranges)
    if rating_ranges and all(
        isinstance(band.min, str) and parse_bound(band.min) is None
        for band in rating_ranges
    ):
        return RangeType.SELECTION
    return RangeType.RANGE


def build_rules(
    norm_parameters: Iterable[NormParameter],
    parameters: Optional[Iterable[Parameter]] = None,
) -> Dict[str, RatingRule]:
    """
    Build the rule set of a norm, keyed by parameter code.

    Range type precedence: the association's own type, then the catalogue
    parameter's type, then inference from the bands.
    """
    catalogue = {p.id: p for p in parameters or []}
    rules = {}
    for assoc in norm_parameters:
        range_type = assoc.range_type
        if range_type is None and assoc.parameter_id in catalogue:
            range_type = catalogue[assoc.parameter_id].range_type
        if range_type is None:
            range_type = infer_range_type(assoc.rating_ranges)
        rules[assoc.parameter_code] = RatingRule(
            range_type=range_type,
            rating_ranges=list(assoc.rating_ranges),
        )
    return rules


def resolve_ratings(
    values: Mapping[str, Optional[str]],
    rules: Mapping[str, RatingRule],
    overrides: Optional[Dict[str, Rating]] = None,
) -> Dict[str, Rating]:
    """
    Rate every value that has a rule.

    Args:
        values: Parameter code -> raw value as entered
        rules: Parameter code -> rating rule
        overrides: Extra sentinel literal -> fixed rating, applied to every
            range rule (rule-specific sentinels live in their bands)

    Returns:
        Parameter code -> rating (sparse)
    """
    ratings: Dict[str, Union[int, float]] = {}
    for code, raw_value in values.items():
        if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
            continue
        rule = rules.get(code)
        if rule is None:
            continue
        rating = match_rating(rule.range_type, rule.rating_ranges, raw_value, overrides)
        if rating is not UNRATED:
            ratings[code] = rating
    return ratings
