"""
Classifier — Primary Score to Risk Class

Maps a numeric score onto an ordered threshold table, top-down,
first match wins. Bands are lower-bound inclusive.

The default table is DIN 50929-3 (B0 soil aggressiveness):
    score >= 0          -> Ia  "Very low"
    -4 <= score < 0     -> Ib  "Low"
    -10 <= score < -4   -> II  "Medium"
    score < -10         -> III "High"

The table is a parameter, not a constant: callers and norms may
supply their own bands. Display labels are injected by the caller.
"""

import math
from typing import Dict, List, Optional, Sequence

from corrosion_risk.schemas import Classification, ClassificationBand


# ============================================================================
# THRESHOLD CONSTANTS — DIN 50929-3 B0 classes
# ============================================================================

THRESHOLD_VERY_LOW = 0     # At or above = Ia
THRESHOLD_LOW = -4         # At or above = Ib
THRESHOLD_MEDIUM = -10     # At or above = II
# Below THRESHOLD_MEDIUM = III

DIN50929_BANDS: List[ClassificationBand] = [
    ClassificationBand(lower_bound=THRESHOLD_VERY_LOW, class_code="Ia", stress_label="Very low"),
    ClassificationBand(lower_bound=THRESHOLD_LOW, class_code="Ib", stress_label="Low"),
    ClassificationBand(lower_bound=THRESHOLD_MEDIUM, class_code="II", stress_label="Medium"),
    ClassificationBand(lower_bound=None, class_code="III", stress_label="High"),
]


def validate_bands(bands: Sequence[ClassificationBand]) -> None:
    """
    Check that a threshold table is usable.

    Raises:
        ValueError: empty table, non-descending bounds, or no final
            unbounded band
    """
    if not bands:
        raise ValueError("classification table is empty")
    previous = math.inf
    for index, band in enumerate(bands):
        if band.lower_bound is None:
            if index != len(bands) - 1:
                raise ValueError("only the last band may be unbounded")
            return
        if band.lower_bound >= previous:
            raise ValueError("band lower bounds must be strictly descending")
        previous = band.lower_bound
    raise ValueError("last band must be unbounded below")


def classify(
    score: float,
    bands: Optional[Sequence[ClassificationBand]] = None,
    labels: Optional[Dict[str, str]] = None,
) -> Classification:
    """
    Classify a primary output score.

    Args:
        score: Primary output score (conventionally B0)
        bands: Ordered threshold table (default: DIN 50929-3)
        labels: Optional class code -> display label overrides

    Returns:
        Classification with class code and stress label

    Raises:
        ValueError: bands is not a usable table (see validate_bands)
    """
    table = bands if bands is not None else DIN50929_BANDS
    validate_bands(table)

    # validate_bands guarantees an unbounded last band
    chosen = table[-1]
    for band in table:
        if band.lower_bound is None or score >= band.lower_bound:
            chosen = band
            break

    label = chosen.stress_label
    if labels and chosen.class_code in labels:
        label = labels[chosen.class_code]

    return Classification(class_code=chosen.class_code, stress_label=label)
