"""
Input Validation — Live Form Checks and Configuration Consistency

Raw values are checked against a parameter's range_type/range_value
before they are stored. Configuration problems (inconsistent parameters,
norms without outputs, formulas reading unknown codes) are reported as
issues for the caller to show, never raised.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from corrosion_risk.schemas import (
    ClassificationBand,
    ConfigurationIssue,
    Norm,
    Parameter,
    RangeType,
    RatingRange,
)

from .classifier import validate_bands
from .formulas import FormulaError, compile_formula
from .matcher import literal_options, parse_bound, parse_number


# Issue codes
ISSUE_NO_OUTPUTS = "no_outputs"
ISSUE_FORMULA_SYNTAX = "formula_syntax"
ISSUE_UNKNOWN_REFERENCE = "unknown_reference"
ISSUE_INCONSISTENT_PARAMETER = "inconsistent_parameter"
ISSUE_EMPTY_RATING_RANGES = "empty_rating_ranges"
ISSUE_INVALID_BANDS = "invalid_classification_bands"

# "0-10", "(-1)-0", "0-10,000", "0-100%", "500-"
_BOUND = r"\(?\s*-?\s*\d[\d,]*(?:\.\d+)?\s*\)?"
_RANGE_VALUE = re.compile(
    rf"^\s*(?P<min>{_BOUND})\s*(?:-\s*(?P<max>{_BOUND})?)?\s*%?\s*$"
)

THRESHOLD_TYPES = {
    RangeType.GREATER,
    RangeType.GREATER_EQUAL,
    RangeType.LESS,
    RangeType.LESS_EQUAL,
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking one raw value."""
    valid: bool
    message: Optional[str] = None


VALID = ValidationResult(valid=True)


def parse_range_value(range_value: str) -> Optional[Tuple[float, Optional[float]]]:
    """
    Parse a `range` range_value into (min, max).

    Returns None when the text is not a range. max is None for open ranges.
    """
    if not range_value:
        return None
    match = _RANGE_VALUE.match(range_value)
    if match is None:
        return None
    low = parse_bound(match.group("min"))
    high = parse_bound(match.group("max")) if match.group("max") else None
    if low is None:
        return None
    if high is not None and high < low:
        return None
    return low, high


def parse_options(range_value: str) -> List[str]:
    """Options of a `selection` range_value, blanks dropped."""
    return [opt.strip() for opt in (range_value or "").split(",") if opt.strip()]


def _format_limit(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def validate_raw_value(
    parameter: Parameter,
    raw_value: Optional[str],
    rating_ranges: Optional[Iterable[RatingRange]] = None,
) -> ValidationResult:
    """
    Check a value as typed into a measurement form.

    Empty input is always valid ("not measured yet"). For range parameters,
    sentinel literals are accepted only when the norm's rating_ranges for
    the parameter carry them (e.g. "impurities" on Z1).
    """
    if raw_value is None or not str(raw_value).strip():
        return VALID
    raw_value = str(raw_value).strip()
    range_type = parameter.range_type

    if range_type == RangeType.OPEN:
        return VALID

    if range_type == RangeType.SELECTION:
        options = parse_options(parameter.range_value)
        if raw_value in options:
            return VALID
        return ValidationResult(False, f"Value must be one of: {', '.join(options)}")

    if range_type == RangeType.RANGE and raw_value in literal_options(rating_ranges or []):
        return VALID

    number = parse_number(raw_value)
    if number is None:
        return ValidationResult(False, "Please enter a valid number")

    if range_type == RangeType.RANGE:
        bounds = parse_range_value(parameter.range_value)
        if bounds is None:
            return VALID
        low, high = bounds
        if number < low or (high is not None and number > high):
            upper = f" and {_format_limit(high)}" if high is not None else "+"
            return ValidationResult(False, f"Value must be between {_format_limit(low)}{upper}")
        return VALID

    limit = parse_number(parameter.range_value)
    if limit is None:
        return VALID

    checks = {
        RangeType.GREATER: (number > limit, ">"),
        RangeType.GREATER_EQUAL: (number >= limit, ">="),
        RangeType.LESS: (number < limit, "<"),
        RangeType.LESS_EQUAL: (number <= limit, "<="),
    }
    ok, symbol = checks[range_type]
    if ok:
        return VALID
    return ValidationResult(False, f"Value must be {symbol} {_format_limit(limit)}")


def check_parameter_consistency(parameter: Parameter) -> Optional[str]:
    """
    Verify that range_type and range_value agree.

    Returns:
        Description of the inconsistency, or None when consistent
    """
    range_type = parameter.range_type
    if range_type == RangeType.OPEN:
        return None
    if range_type == RangeType.RANGE:
        if parse_range_value(parameter.range_value) is None:
            return f"range value '{parameter.range_value}' is not a 'min-max' range"
        return None
    if range_type == RangeType.SELECTION:
        if not parse_options(parameter.range_value):
            return "selection needs a comma-separated option list"
        return None
    if range_type in THRESHOLD_TYPES and parse_number(parameter.range_value) is None:
        return f"threshold '{parameter.range_value}' is not a number"
    return None


def check_classification_bands(
    bands: Sequence[ClassificationBand],
    subject: Optional[str] = None,
) -> Optional[ConfigurationIssue]:
    """Issue describing an unusable threshold table, or None."""
    try:
        validate_bands(bands)
    except ValueError as e:
        return ConfigurationIssue(
            code=ISSUE_INVALID_BANDS,
            message=f"Classification bands unusable ({e}); DIN 50929-3 classes apply",
            subject=subject,
        )
    return None


def validate_norm(
    norm: Norm,
    parameters: Optional[Iterable[Parameter]] = None,
) -> List[ConfigurationIssue]:
    """
    Collect configuration issues of a norm.

    Args:
        norm: Norm to check
        parameters: Optional catalogue of the parameters it references

    Returns:
        Issues in discovery order (empty when the norm is usable)
    """
    issues: List[ConfigurationIssue] = []

    if not norm.is_configured:
        issues.append(ConfigurationIssue(
            code=ISSUE_NO_OUTPUTS,
            message=f"Norm '{norm.name}' has no output formulas configured",
            subject=norm.id,
        ))

    codes = set(norm.parameter_codes)
    for output in norm.output_config:
        try:
            compiled = compile_formula(output.formula)
        except FormulaError as e:
            issues.append(ConfigurationIssue(
                code=ISSUE_FORMULA_SYNTAX,
                message=f"Output '{output.name}': {e}",
                subject=output.name,
            ))
            continue
        unknown = sorted(compiled.references - codes)
        if unknown and codes:
            issues.append(ConfigurationIssue(
                code=ISSUE_UNKNOWN_REFERENCE,
                message=f"Output '{output.name}' reads codes not in the norm: {', '.join(unknown)}",
                subject=output.name,
            ))

    for assoc in norm.parameters:
        if not assoc.rating_ranges:
            issues.append(ConfigurationIssue(
                code=ISSUE_EMPTY_RATING_RANGES,
                message=f"Parameter {assoc.parameter_code} has no rating ranges",
                subject=assoc.parameter_code,
            ))

    if norm.classification_bands is not None:
        issue = check_classification_bands(norm.classification_bands, norm.id)
        if issue:
            issues.append(issue)

    referenced = {assoc.parameter_id for assoc in norm.parameters}
    for parameter in parameters or []:
        if parameter.id not in referenced:
            continue
        problem = check_parameter_consistency(parameter)
        if problem:
            issues.append(ConfigurationIssue(
                code=ISSUE_INCONSISTENT_PARAMETER,
                message=f"Parameter {parameter.label}: {problem}",
                subject=parameter.id,
            ))

    return issues
