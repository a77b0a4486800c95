"""
AS/NZS 2041.1:2011 — Zinc Coating Loss Rate

Estimates the durability of buried galvanised steel from soil parameters:
zinc loss rate (mean ± sd), steel loss rate, zinc coating lifetime and the
steel reserve needed once the coating is consumed.

Constraints:
- Soil is aggressive when ANY aggressive condition holds
- Never raises on bad input: unusable values give the zero assessment
- Values are looked up by the keys named in ZincLossInputs (ids or codes)
"""

import logging
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from corrosion_risk.rules.matcher import parse_number


logger = logging.getLogger(__name__)


# ============================================================================
# THRESHOLD CONSTANTS — Aggressive soil conditions
# ============================================================================

AGGRESSIVE_RESISTIVITY = 30      # Below = aggressive (Ohm.m)
AGGRESSIVE_CHLORIDES = 300       # Above = aggressive (mg/kg)
PH_LOWER = 5.5                   # Below = aggressive
PH_UPPER = 8.5                   # Above = aggressive
UNDRAINED_SOIL = "undrained"     # Soil type literal = aggressive

# Zinc loss rates as (mean, standard deviation) in μm/year
AGGRESSIVE_ZINC_LOSS = (25, 8)
NON_AGGRESSIVE_ZINC_LOSS = (15, 4)

STEEL_LOSS_RATE = 12             # μm/year
DEFAULT_COATING_THICKNESS = 85   # μm

LOSS_RATE_UNIT = "μm/year"


class ZincLossInputs(BaseModel):
    """Keys under which the calculation inputs are stored in datapoint values."""
    resistivity: str
    chlorides: str
    soil_type: str
    ph: str
    coating_thickness: Optional[str] = Field(
        default=None,
        description=f"Coating thickness key (default: {DEFAULT_COATING_THICKNESS} μm)"
    )


class ZincLossAssessment(BaseModel):
    """Result of the zinc loss calculation. All zero when inputs are unusable."""
    valid: bool = False
    aggressive: bool = False
    zinc_loss_rate: float = 0
    zinc_loss_rate_sd: float = 0
    steel_loss_rate: float = 0
    zinc_lifetime: int = Field(0, description="Years until the coating is consumed")
    required_reserve: float = Field(0, description="Steel reserve in mm")


def is_aggressive_soil(
    resistivity: float,
    chlorides: float,
    ph: float,
    soil_type: Optional[str] = None,
) -> bool:
    """True when any AS/NZS 2041.1 aggressive-soil condition holds."""
    return (
        resistivity < AGGRESSIVE_RESISTIVITY
        or chlorides > AGGRESSIVE_CHLORIDES
        or ph < PH_LOWER
        or ph > PH_UPPER
        or (soil_type or "").strip().lower() == UNDRAINED_SOIL
    )


def calculate_zinc_loss_rate(
    values: Optional[Mapping[str, str]],
    inputs: ZincLossInputs,
) -> ZincLossAssessment:
    """
    Calculate zinc/steel loss rates for one datapoint.

    Args:
        values: Datapoint raw values
        inputs: Keys of the required parameters within values

    Returns:
        ZincLossAssessment (valid=False and all zero for unusable input)
    """
    values = values or {}
    resistivity = parse_number(values.get(inputs.resistivity))
    chlorides = parse_number(values.get(inputs.chlorides))
    ph = parse_number(values.get(inputs.ph))
    soil_type = values.get(inputs.soil_type)

    if inputs.coating_thickness is not None:
        coating = parse_number(values.get(inputs.coating_thickness))
    else:
        coating = DEFAULT_COATING_THICKNESS

    if resistivity is None or chlorides is None or ph is None:
        logger.warning("Zinc loss calculation skipped: resistivity, chlorides or pH is not numeric")
        return ZincLossAssessment()
    if coating is None or coating < 0:
        logger.warning("Zinc loss calculation skipped: invalid coating thickness")
        return ZincLossAssessment()

    aggressive = is_aggressive_soil(resistivity, chlorides, ph, soil_type)
    mean, sd = AGGRESSIVE_ZINC_LOSS if aggressive else NON_AGGRESSIVE_ZINC_LOSS
    lifetime = int(coating // mean)
    reserve = round(STEEL_LOSS_RATE * lifetime / 1000, 3)

    logger.debug(
        f"Zinc loss: aggressive={aggressive}, rate={mean}±{sd}, "
        f"lifetime={lifetime}y, reserve={reserve}mm"
    )
    return ZincLossAssessment(
        valid=True,
        aggressive=aggressive,
        zinc_loss_rate=mean,
        zinc_loss_rate_sd=sd,
        steel_loss_rate=STEEL_LOSS_RATE,
        zinc_lifetime=lifetime,
        required_reserve=reserve,
    )


def format_zinc_loss_rate(assessment: ZincLossAssessment) -> str:
    """Display text, e.g. "15 ± 4 [μm/year]"."""
    if not assessment.valid:
        return f"0 [{LOSS_RATE_UNIT}]"
    return (
        f"{_format_rate(assessment.zinc_loss_rate)} ± "
        f"{_format_rate(assessment.zinc_loss_rate_sd)} [{LOSS_RATE_UNIT}]"
    )


def _format_rate(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
