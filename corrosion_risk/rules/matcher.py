"""
Range Matcher — One Raw Value Against One Rating Rule

Returns a rating number or UNRATED. Never raises on bad input:
an unparseable value simply has no rating yet.

Constraints:
- Numeric bands are tried by `min` DESCENDING; first match wins
- Bands are half-open: min <= value < max (max None = unbounded)
- Sentinel literals (e.g. "impurities" on Z1) bypass numeric comparison,
  but only for rules that carry a literal `min` row for them
- Selection rules match the option literal stored in `min`
"""

import math
import re
from typing import Dict, Iterable, List, Optional, Tuple, Union

from corrosion_risk.schemas import RangeType, RatingRange


Rating = Union[int, float]

# No rating could be assigned
UNRATED = None

# Literal entered instead of a percentage when the soil sample holds impurities
# (DIN 50929-3 Z1 only; carried as a literal band of that rule)
IMPURITIES_SENTINEL = "impurities"
IMPURITIES_RATING = -12

# Formatting allowed around bounds: "(-1)", "10,000"
_BOUND_FORMATTING = re.compile(r"[,()\s]")


def parse_number(text: Union[str, int, float, None]) -> Optional[float]:
    """
    Parse a raw value as a finite float.

    Returns None for empty, malformed, NaN or infinite input.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        value = float(text)
    else:
        try:
            value = float(text.strip())
        except ValueError:
            return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_bound(bound: Union[str, int, float, None]) -> Optional[float]:
    """Parse a band bound, stripping parenthesis/comma formatting first."""
    if isinstance(bound, str):
        bound = _BOUND_FORMATTING.sub("", bound)
        if not bound:
            return None
    return parse_number(bound)


def option_literal(value: Union[str, int, float, None]) -> Optional[str]:
    """Canonical text of a selection option (1 and 1.0 both read "1")."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _numeric_bands(
    rating_ranges: Iterable[RatingRange]
) -> List[Tuple[float, float, Rating]]:
    """(min, max, rating) for every band with a numeric lower bound, min DESC."""
    bands = []
    for band in rating_ranges:
        low = parse_bound(band.min)
        if low is None:
            continue
        if band.max is None or (isinstance(band.max, str) and not band.max.strip()):
            high = math.inf
        else:
            high = parse_bound(band.max)
            if high is None:
                # Malformed upper bound: band can never match
                continue
        bands.append((low, high, band.rating))

    # Stable sort keeps declaration order for equal minimums
    bands.sort(key=lambda b: b[0], reverse=True)
    return bands


def _literal_rating(
    raw_value: str,
    rating_ranges: Iterable[RatingRange],
    overrides: Optional[Dict[str, Rating]],
) -> Optional[Rating]:
    """Rating for a sentinel literal, from overrides or a literal `min` row."""
    if overrides and raw_value in overrides:
        return overrides[raw_value]
    for band in rating_ranges:
        if _is_literal(band.min) and band.min == raw_value:
            return band.rating
    return UNRATED


def _is_literal(bound) -> bool:
    return isinstance(bound, str) and parse_bound(bound) is None


def literal_options(rating_ranges: Iterable[RatingRange]) -> List[str]:
    """Non-numeric `min` literals of a rule (sentinels such as "impurities")."""
    return [band.min for band in rating_ranges if _is_literal(band.min)]


def match_range(
    rating_ranges: Iterable[RatingRange],
    raw_value: str,
    overrides: Optional[Dict[str, Rating]] = None,
) -> Optional[Rating]:
    """Match a raw value against numeric bands (with sentinel override)."""
    rating_ranges = list(rating_ranges)
    literal = _literal_rating(raw_value, rating_ranges, overrides)
    if literal is not UNRATED:
        return literal

    value = parse_number(raw_value)
    if value is None:
        return UNRATED

    for low, high, rating in _numeric_bands(rating_ranges):
        if low <= value < high:
            return rating
    return UNRATED


def match_selection(
    rating_ranges: Iterable[RatingRange],
    raw_value: str,
) -> Optional[Rating]:
    """Exact match of the raw value against each band's option literal."""
    for band in rating_ranges:
        if option_literal(band.min) == raw_value:
            return band.rating
    return UNRATED


def match_rating(
    range_type: Union[RangeType, str],
    rating_ranges: Iterable[RatingRange],
    raw_value: Optional[str],
    overrides: Optional[Dict[str, Rating]] = None,
) -> Optional[Rating]:
    """
    Evaluate one raw value against one parameter's rating rule.

    Args:
        range_type: Parameter range type
        rating_ranges: Bands of the rule under the active norm
        raw_value: Value as entered (string)
        overrides: Sentinel literal -> fixed rating (range type only)

    Returns:
        Rating number, or UNRATED (None) when no band applies
    """
    if raw_value is None:
        return UNRATED
    if not isinstance(raw_value, str):
        raw_value = option_literal(raw_value)

    try:
        range_type = RangeType(range_type)
    except ValueError:
        return UNRATED

    if range_type == RangeType.RANGE:
        return match_range(rating_ranges, raw_value, overrides)
    if range_type == RangeType.SELECTION:
        return match_selection(rating_ranges, raw_value)

    # Threshold and open types are validated in forms, never rated
    return UNRATED
