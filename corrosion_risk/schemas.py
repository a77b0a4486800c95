"""
Domain Schemas — Parameters, Norms, Datapoints, Results

Canonical in-memory shape for the rating engine. All keys are snake_case;
camelCase documents are mapped at the storage boundary (see storage.casing).

Constraints:
- rating_ranges and output_config round-trip to JSON without loss
- Output names are unique within a norm
- Datapoint values are raw strings as entered (sentinels allowed)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


Number = Union[int, float]


# ============================================================================
# Enums
# ============================================================================

class RangeType(str, Enum):
    """How a parameter's raw input is validated and rated."""
    RANGE = "range"
    SELECTION = "selection"
    OPEN = "open"
    GREATER = "greater"
    LESS = "less"
    GREATER_EQUAL = "greaterEqual"
    LESS_EQUAL = "lessEqual"


class ParameterUnit(str, Enum):
    """Closed set of physical units a parameter may carry."""
    OHM_M = "Ohm.m"
    OHM_CM = "Ohm.cm"
    MMOL_PER_KG = "mmol/kg"
    MG_PER_KG = "mg/kg"
    G_PER_MOL = "g/mol"
    MG_PER_MMOL = "mg/mmol"
    PERCENT = "%"
    PPM = "ppm"
    VOLT = "V"
    MILLIVOLT = "mV"
    AMPERE = "A"
    MILLIAMPERE = "mA"


class EvaluationStatus(str, Enum):
    """Outcome of evaluating a datapoint against a norm."""
    OK = "ok"
    NOT_CONFIGURED = "not_configured"


# ============================================================================
# Reference data
# ============================================================================

class Parameter(BaseModel):
    """A measurable quantity from the shared parameter catalogue."""
    id: str = Field(..., min_length=1)
    short_name: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    unit: Optional[ParameterUnit] = None
    range_type: RangeType = RangeType.OPEN
    range_value: str = ""

    @property
    def label(self) -> str:
        return self.short_name or self.name or self.id


class RatingRange(BaseModel):
    """
    One row of a parameter's rating rule.

    `min` holds a numeric bound for range rules and the option literal for
    selection rules. `max` of None means unbounded above.
    """
    min: Union[int, float, str, None] = None
    max: Union[int, float, str, None] = None
    rating: Number


class NormParameter(BaseModel):
    """Association of a parameter with a norm, carrying norm-specific bands."""
    parameter_id: str
    parameter_code: str = Field(..., min_length=1)
    rating_ranges: List[RatingRange] = Field(default_factory=list)
    range_type: Optional[RangeType] = None


class OutputDefinition(BaseModel):
    """A named output score computed from the rating mapping."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    formula: str = ""
    description: Optional[str] = None


class ClassificationBand(BaseModel):
    """Lower-bound-inclusive threshold band. None lower bound = unbounded."""
    lower_bound: Optional[float] = None
    class_code: str
    stress_label: str


class Norm(BaseModel):
    """
    A named, versioned standard: which parameters participate and how their
    ratings combine into output scores.
    """
    id: str = Field(..., min_length=1)
    name: str
    description: Optional[str] = None
    version: Optional[str] = None
    parameters: List[NormParameter] = Field(default_factory=list)
    output_config: List[OutputDefinition] = Field(default_factory=list)
    classification_bands: Optional[List[ClassificationBand]] = None

    @model_validator(mode='after')
    def unique_output_names(self):
        """Output names must be unique within a norm."""
        seen = set()
        for output in self.output_config:
            if output.name in seen:
                raise ValueError(f"duplicate output name '{output.name}' in norm '{self.id}'")
            seen.add(output.name)
        return self

    @property
    def is_configured(self) -> bool:
        return len(self.output_config) > 0

    @property
    def parameter_codes(self) -> List[str]:
        return [p.parameter_code for p in self.parameters]


# ============================================================================
# Measurements
# ============================================================================

class Datapoint(BaseModel):
    """One measurement event. Owns its raw values and cached ratings."""
    id: str = Field(..., min_length=1)
    sequential_id: Optional[int] = None
    name: Optional[str] = None
    timestamp: Optional[datetime] = None
    values: Dict[str, str] = Field(default_factory=dict)
    ratings: Dict[str, Number] = Field(default_factory=dict)

    @field_validator('values', mode='before')
    @classmethod
    def coerce_values_to_text(cls, v):
        """Stored values may come back numeric; keep them as entered text."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {
                key: ("" if raw is None else raw if isinstance(raw, str) else _format_number(raw))
                for key, raw in v.items()
            }
        return v

    @field_validator('timestamp')
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# ============================================================================
# Results
# ============================================================================

class Classification(BaseModel):
    """Derived risk class. Serialised with the key `class`."""
    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    class_code: str = Field(..., alias="class")
    stress_label: str


class ConfigurationIssue(BaseModel):
    """A norm or parameter setup problem the caller should correct."""
    code: str
    message: str
    subject: Optional[str] = None


class DatapointResult(BaseModel):
    """Per-datapoint bundle consumed by analysis and report views."""
    datapoint: Datapoint
    status: EvaluationStatus = EvaluationStatus.OK
    ratings: Dict[str, Number] = Field(default_factory=dict)
    outputs: Dict[str, Number] = Field(default_factory=dict)
    classification: Optional[Classification] = None
    missing_parameters: List[str] = Field(default_factory=list)
    formula_errors: Dict[str, str] = Field(default_factory=dict)


class BatchEvaluation(BaseModel):
    """Results of evaluating many datapoints against one norm."""
    norm_id: str
    status: EvaluationStatus = EvaluationStatus.OK
    results: List[DatapointResult] = Field(default_factory=list)
    configuration_issues: List[ConfigurationIssue] = Field(default_factory=list)


def _format_number(value) -> str:
    """Render a stored number the way it would have been typed."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
