"""
Standards Module — Built-in Reference Norms and Calculations

Public API:
- din50929_norm: DIN 50929-3:2018 norm (Z1..Z10, B0, classes Ia..III)
- din50929_parameters: Parameter catalogue entries for Z1..Z10
- DIN50929_EXPECTED_CODES: Codes checked by the missing-parameter diagnostic
- calculate_zinc_loss_rate: AS/NZS 2041.1:2011 zinc/steel loss rates
"""

from .din50929 import (
    B0_CODES,
    DIN50929_EXPECTED_CODES,
    DIN50929_NORM_ID,
    din50929_norm,
    din50929_parameters,
)
from .asnzs2041 import (
    ZincLossAssessment,
    ZincLossInputs,
    calculate_zinc_loss_rate,
    format_zinc_loss_rate,
    is_aggressive_soil,
)

__all__ = [
    "B0_CODES",
    "DIN50929_EXPECTED_CODES",
    "DIN50929_NORM_ID",
    "din50929_norm",
    "din50929_parameters",
    "ZincLossAssessment",
    "ZincLossInputs",
    "calculate_zinc_loss_rate",
    "format_zinc_loss_rate",
    "is_aggressive_soil",
]
