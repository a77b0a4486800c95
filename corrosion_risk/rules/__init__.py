"""
Rules Module — Rating & Classification Engine

Public API:
- match_rating: One raw value against one rating rule
- resolve_ratings / build_rules: Raw values to a sparse rating mapping
- evaluate_outputs / compile_formula: Sandboxed norm output formulas
- classify: Primary score to risk class
- evaluate_datapoint(s) / NormAssessor: Full pipeline per datapoint
- validate_raw_value / validate_norm: Form and configuration checks
"""

from .matcher import (
    match_rating,
    parse_number,
    parse_bound,
    literal_options,
    UNRATED,
    IMPURITIES_SENTINEL,
    IMPURITIES_RATING,
)
from .resolver import RatingRule, build_rules, infer_range_type, resolve_ratings
from .formulas import (
    CompiledFormula,
    FormulaError,
    compile_formula,
    evaluate_formula,
    evaluate_outputs,
    evaluate_outputs_detailed,
)
from .classifier import (
    classify,
    validate_bands,
    DIN50929_BANDS,
    THRESHOLD_VERY_LOW,
    THRESHOLD_LOW,
    THRESHOLD_MEDIUM,
)
from .validation import (
    ValidationResult,
    check_classification_bands,
    check_parameter_consistency,
    parse_range_value,
    validate_norm,
    validate_raw_value,
)
from .assessor import (
    NormAssessor,
    classification_table,
    PRIMARY_OUTPUT,
    evaluate_datapoint,
    evaluate_datapoints,
    find_missing_parameters,
    refresh_ratings,
)

__all__ = [
    "match_rating",
    "parse_number",
    "parse_bound",
    "literal_options",
    "UNRATED",
    "IMPURITIES_SENTINEL",
    "IMPURITIES_RATING",
    "RatingRule",
    "build_rules",
    "infer_range_type",
    "resolve_ratings",
    "CompiledFormula",
    "FormulaError",
    "compile_formula",
    "evaluate_formula",
    "evaluate_outputs",
    "evaluate_outputs_detailed",
    "classify",
    "validate_bands",
    "DIN50929_BANDS",
    "THRESHOLD_VERY_LOW",
    "THRESHOLD_LOW",
    "THRESHOLD_MEDIUM",
    "ValidationResult",
    "check_classification_bands",
    "check_parameter_consistency",
    "parse_range_value",
    "validate_norm",
    "validate_raw_value",
    "NormAssessor",
    "classification_table",
    "PRIMARY_OUTPUT",
    "evaluate_datapoint",
    "evaluate_datapoints",
    "find_missing_parameters",
    "refresh_ratings",
]
