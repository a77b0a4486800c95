"""
Pydantic Schemas — API Request/Response Models

Evaluation payloads reuse the domain models directly; these wrap them
for the individual endpoints.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from corrosion_risk.schemas import Datapoint, Norm, Parameter, RangeType, RatingRange
from corrosion_risk.standards import ZincLossAssessment, ZincLossInputs


class EvaluateRequest(BaseModel):
    """Evaluate datapoints against a registered norm."""
    datapoints: List[Datapoint] = Field(default_factory=list)
    expected_codes: Optional[List[str]] = Field(
        default=None,
        description="Codes reported as missing when absent (default: norm's codes)"
    )


class InlineEvaluateRequest(EvaluateRequest):
    """Evaluate datapoints against a norm supplied in the request."""
    norm: Norm
    parameters: Optional[List[Parameter]] = None


class MatchRatingRequest(BaseModel):
    """Rate one raw value against one rule."""
    range_type: RangeType
    rating_ranges: List[RatingRange] = Field(default_factory=list)
    value: str


class MatchRatingResponse(BaseModel):
    rating: Optional[Union[int, float]] = Field(
        None, description="None when the value is unrated"
    )


class ValidateValueRequest(BaseModel):
    """Check a value as typed into a measurement form."""
    parameter: Parameter
    value: str = ""
    rating_ranges: List[RatingRange] = Field(
        default_factory=list,
        description="Norm bands of the parameter; literal rows allow sentinel values"
    )


class ValidateValueResponse(BaseModel):
    valid: bool
    message: Optional[str] = None
    consistency_issue: Optional[str] = None


class NormSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    version: Optional[str] = None
    parameter_codes: List[str]
    outputs: List[str]
    is_configured: bool


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    norms: int
    message: str


class ZincLossRequest(BaseModel):
    """AS/NZS 2041.1 zinc loss calculation for one set of values."""
    values: Dict[str, Union[str, int, float]] = Field(default_factory=dict)
    inputs: ZincLossInputs


class ZincLossResponse(BaseModel):
    assessment: ZincLossAssessment
    formatted_loss_rate: str
