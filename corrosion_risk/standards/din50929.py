"""
DIN 50929-3:2018 — Built-in Reference Norm

Probability of corrosion of metallic materials when subject to corrosion
from the outside (buried and underwater pipelines and structural
components). Soil parameters Z1..Z10 are rated and summed into B0,
which determines the soil aggressiveness class Ia..III.
"""

from typing import List

from corrosion_risk.rules.classifier import DIN50929_BANDS
from corrosion_risk.rules.matcher import IMPURITIES_RATING, IMPURITIES_SENTINEL
from corrosion_risk.schemas import (
    Norm,
    NormParameter,
    OutputDefinition,
    Parameter,
    ParameterUnit,
    RangeType,
    RatingRange,
)


DIN50929_NORM_ID = "din50929-3"

# Codes the missing-parameter diagnostic expects for this norm
DIN50929_EXPECTED_CODES: List[str] = [f"Z{i}" for i in range(1, 11)] + ["Z15"]

# Codes summed into B0
B0_CODES: List[str] = [f"Z{i}" for i in range(1, 11)]


def _bands(*rows) -> List[RatingRange]:
    """Rows of (min, max, rating); max None = unbounded."""
    return [RatingRange(min=low, max=high, rating=rating) for low, high, rating in rows]


# (code, name, unit, range_type, range_value, bands)
_DEFINITIONS = [
    (
        "Z1", "Soil type/Proportion of components that can be sloughed off",
        ParameterUnit.PERCENT, RangeType.RANGE, "0-100%",
        _bands((0, 10, 4), (10, 30, 2), (30, 50, 0), (50, 80, -2), (80, None, -4), (IMPURITIES_SENTINEL, None, IMPURITIES_RATING)),
    ),
    (
        "Z2", "Specific soil resistivity",
        ParameterUnit.OHM_M, RangeType.RANGE, "0-10,000",
        _bands((500, None, 4), (200, 500, 2), (50, 200, 0), (20, 50, -2), (10, 20, -4), (0, 10, -6)),
    ),
    (
        "Z3", "Water content",
        ParameterUnit.PERCENT, RangeType.RANGE, "0-100",
        _bands((0, 20, 0), (20, 40, -1), (40, None, -2)),
    ),
    (
        "Z4", "pH value",
        None, RangeType.RANGE, "0-14",
        _bands((0, 4, -2), (4, 5, -1), (5, 8, 0), (8, 9, -1), (9, None, -2)),
    ),
    (
        "Z5", "Buffering capacity",
        None, RangeType.RANGE, "0-100",
        _bands((0, 2, 0), (2, 10, -1), (10, 20, -2), (20, None, -3)),
    ),
    (
        "Z6", "Carbonate content",
        ParameterUnit.PERCENT, RangeType.RANGE, "0-100",
        _bands((0, 1, -2), (1, 5, -1), (5, 10, 0), (10, None, 1)),
    ),
    (
        "Z7", "Sulphate reducing bacteria/Sulphide content",
        ParameterUnit.MG_PER_KG, RangeType.RANGE, "0-50",
        _bands((0, 5, 0), (5, 10, -3), (10, None, -6)),
    ),
    (
        "Z8", "Sulphate content",
        ParameterUnit.MMOL_PER_KG, RangeType.RANGE, "0-50",
        _bands((0, 2, 0), (2, 5, -1), (5, 10, -2), (10, None, -3)),
    ),
    (
        "Z9", "Neutral salts/Chlorides and sulphates in aqueous extract",
        ParameterUnit.MMOL_PER_KG, RangeType.RANGE, "0-500",
        _bands((0, 3, 0), (3, 10, -1), (10, 30, -2), (30, 100, -3), (100, None, -4)),
    ),
    (
        "Z10", "Location of the object in relation to the groundwater",
        None, RangeType.SELECTION, "never,constant,intermittent",
        _bands(("never", None, 0), ("constant", None, -1), ("intermittent", None, -2)),
    ),
]


def din50929_parameters() -> List[Parameter]:
    """Catalogue entries for Z1..Z10."""
    return [
        Parameter(
            id=code.lower(),
            short_name=code,
            name=name,
            unit=unit,
            range_type=range_type,
            range_value=range_value,
        )
        for code, name, unit, range_type, range_value, _ in _DEFINITIONS
    ]


def din50929_norm() -> Norm:
    """A fresh copy of the DIN 50929-3:2018 norm."""
    return Norm(
        id=DIN50929_NORM_ID,
        name="DIN 50929-3:2018",
        description=(
            "Probability of corrosion of metallic materials when subject to "
            "corrosion from the outside"
        ),
        version="2018",
        parameters=[
            NormParameter(
                parameter_id=code.lower(),
                parameter_code=code,
                rating_ranges=[band.model_copy() for band in bands],
                range_type=range_type,
            )
            for code, _, _, range_type, _, bands in _DEFINITIONS
        ],
        output_config=[
            OutputDefinition(
                id="b0",
                name="B0",
                formula=" + ".join(f"values.{code}" for code in B0_CODES),
                description="Soil aggressiveness: sum of ratings Z1 to Z10",
            ),
        ],
        classification_bands=[band.model_copy() for band in DIN50929_BANDS],
    )
