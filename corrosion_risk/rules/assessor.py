"""
Norm Assessment — Datapoints to Ratings, Outputs and Risk Classes

This is where the rating pipeline is coordinated:
raw values -> ratings -> output scores -> classification.

Constraints:
- Deterministic: same datapoint + norm = same result
- A norm without outputs is reported as NOT_CONFIGURED, never as 0/0
- One failing datapoint never prevents the rest of a batch
- Missing-parameter diagnostics are informational only
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from corrosion_risk.schemas import (
    BatchEvaluation,
    ClassificationBand,
    Datapoint,
    DatapointResult,
    EvaluationStatus,
    Norm,
    Parameter,
)

from .classifier import DIN50929_BANDS, classify, validate_bands
from .formulas import evaluate_outputs_detailed
from .resolver import build_rules, resolve_ratings
from .validation import ISSUE_NO_OUTPUTS, check_classification_bands, validate_norm


logger = logging.getLogger(__name__)

# Output used for classification
PRIMARY_OUTPUT = "B0"

# Score classified when the primary output is absent
DEFAULT_PRIMARY_SCORE = 0


def _is_blank(value: Optional[str]) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def values_by_code(values: Mapping[str, str], norm: Norm) -> Dict[str, str]:
    """
    Re-key datapoint values by parameter code.

    Values may be stored under the parameter id or the code; codes win
    when both are present.
    """
    id_to_code = {p.parameter_id: p.parameter_code for p in norm.parameters}
    keyed: Dict[str, str] = {}
    for key, value in values.items():
        code = id_to_code.get(key, key)
        if code in keyed and key != code:
            continue
        keyed[code] = value
    return keyed


def find_missing_parameters(
    values: Mapping[str, str],
    expected_codes: Iterable[str],
) -> List[str]:
    """
    Expected codes with no (non-blank) value, in expected order.

    Purely informational: evaluation proceeds regardless.
    """
    return [code for code in expected_codes if _is_blank(values.get(code))]


def primary_score(outputs: Mapping[str, float], name: str = PRIMARY_OUTPUT) -> float:
    """Score used for classification; case-insensitive name lookup."""
    if name in outputs:
        return outputs[name]
    lowered = name.lower()
    for key, value in outputs.items():
        if key.lower() == lowered:
            return value
    return DEFAULT_PRIMARY_SCORE


def classification_table(
    norm: Norm,
    bands: Optional[Sequence[ClassificationBand]] = None,
) -> Sequence[ClassificationBand]:
    """
    Threshold table used to classify results of a norm.

    Explicit bands win, then the norm's own table. An unusable table is
    logged and replaced by DIN 50929-3; validate_norm reports it as a
    configuration issue.
    """
    table = bands if bands is not None else norm.classification_bands
    if table is None:
        return DIN50929_BANDS
    try:
        validate_bands(table)
    except ValueError as e:
        logger.warning(f"Norm '{norm.id}': invalid classification bands ({e}), using DIN 50929-3")
        return DIN50929_BANDS
    return table


def evaluate_datapoint(
    datapoint: Datapoint,
    norm: Norm,
    parameters: Optional[Iterable[Parameter]] = None,
    expected_codes: Optional[Sequence[str]] = None,
    primary_output: str = PRIMARY_OUTPUT,
    bands: Optional[Sequence[ClassificationBand]] = None,
    labels: Optional[Dict[str, str]] = None,
) -> DatapointResult:
    """
    Run the full rating pipeline for one datapoint.

    Args:
        datapoint: Measurement event with raw values
        norm: Norm whose rules and outputs apply
        parameters: Optional catalogue used to resolve range types
        expected_codes: Codes reported as missing when absent
            (default: the norm's parameter codes)
        primary_output: Output name used for classification
        bands: Threshold table (default: norm's table, then DIN 50929-3)
        labels: Optional class code -> display label overrides

    Returns:
        DatapointResult bundle
    """
    values = values_by_code(datapoint.values, norm)
    expected = list(expected_codes) if expected_codes is not None else norm.parameter_codes
    missing = find_missing_parameters(values, expected)

    rules = build_rules(norm.parameters, parameters)
    ratings = resolve_ratings(values, rules)

    if not norm.is_configured:
        return DatapointResult(
            datapoint=datapoint,
            status=EvaluationStatus.NOT_CONFIGURED,
            ratings=ratings,
            missing_parameters=missing,
        )

    outputs, errors = evaluate_outputs_detailed(ratings, norm.output_config)
    table = classification_table(norm, bands)
    classification = classify(primary_score(outputs, primary_output), table, labels)

    return DatapointResult(
        datapoint=datapoint,
        status=EvaluationStatus.OK,
        ratings=ratings,
        outputs=outputs,
        classification=classification,
        missing_parameters=missing,
        formula_errors=errors,
    )


def evaluate_datapoints(
    datapoints: Iterable[Datapoint],
    norm: Norm,
    parameters: Optional[Iterable[Parameter]] = None,
    expected_codes: Optional[Sequence[str]] = None,
    primary_output: str = PRIMARY_OUTPUT,
    bands: Optional[Sequence[ClassificationBand]] = None,
    labels: Optional[Dict[str, str]] = None,
) -> BatchEvaluation:
    """
    Evaluate many datapoints against one norm.

    Datapoints are independent; a failure in one is logged and that
    datapoint is skipped while the others still produce results.
    """
    parameters = list(parameters) if parameters is not None else None
    issues = validate_norm(norm, parameters)
    if bands is not None:
        band_issue = check_classification_bands(bands, norm.id)
        if band_issue:
            issues.append(band_issue)
    status = (
        EvaluationStatus.NOT_CONFIGURED
        if any(issue.code == ISSUE_NO_OUTPUTS for issue in issues)
        else EvaluationStatus.OK
    )
    if status == EvaluationStatus.NOT_CONFIGURED:
        logger.warning(f"Norm '{norm.id}' has no outputs configured")

    results: List[DatapointResult] = []
    for datapoint in datapoints:
        try:
            results.append(evaluate_datapoint(
                datapoint,
                norm,
                parameters=parameters,
                expected_codes=expected_codes,
                primary_output=primary_output,
                bands=bands,
                labels=labels,
            ))
        except Exception:
            logger.exception(f"Evaluation of datapoint '{datapoint.id}' failed")

    return BatchEvaluation(
        norm_id=norm.id,
        status=status,
        results=results,
        configuration_issues=issues,
    )


def refresh_ratings(
    datapoint: Datapoint,
    norm: Norm,
    parameters: Optional[Iterable[Parameter]] = None,
) -> Datapoint:
    """
    Recompute a datapoint's cached ratings after its values or the norm's
    rules changed. Returns a new Datapoint; the input is left untouched.
    """
    rules = build_rules(norm.parameters, parameters)
    ratings = resolve_ratings(values_by_code(datapoint.values, norm), rules)
    return datapoint.model_copy(update={"ratings": ratings})


# ============================================================================
# Norm Assessor
# ============================================================================

class NormAssessor:
    """
    Evaluates datapoints against one bound norm.

    Pure deterministic logic. Same input = Same output.
    """

    def __init__(
        self,
        norm: Norm,
        parameters: Optional[Iterable[Parameter]] = None,
        primary_output: str = PRIMARY_OUTPUT,
        expected_codes: Optional[Sequence[str]] = None,
        labels: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize assessor with its norm and parameter catalogue.

        Args:
            norm: Norm to evaluate against
            parameters: Optional parameter catalogue
            primary_output: Output name used for classification
            expected_codes: Codes the missing-parameter diagnostic expects
            labels: Optional class code -> display label overrides
        """
        self.norm = norm
        self.parameters = list(parameters) if parameters is not None else None
        self.primary_output = primary_output
        self.expected_codes = list(expected_codes) if expected_codes is not None else None
        self.labels = labels

    @property
    def is_configured(self) -> bool:
        return self.norm.is_configured

    def assess(self, datapoint: Datapoint) -> DatapointResult:
        """Evaluate a single datapoint."""
        return evaluate_datapoint(
            datapoint,
            self.norm,
            parameters=self.parameters,
            expected_codes=self.expected_codes,
            primary_output=self.primary_output,
            labels=self.labels,
        )

    def assess_many(self, datapoints: Iterable[Datapoint]) -> BatchEvaluation:
        """Evaluate a batch of datapoints."""
        return evaluate_datapoints(
            datapoints,
            self.norm,
            parameters=self.parameters,
            expected_codes=self.expected_codes,
            primary_output=self.primary_output,
            labels=self.labels,
        )

    def refresh(self, datapoint: Datapoint) -> Datapoint:
        """Datapoint copy with recomputed cached ratings."""
        return refresh_ratings(datapoint, self.norm, self.parameters)
