"""
Result Tables — Evaluation Results as DataFrames

Flattens DatapointResult bundles for analysis and report views.
Unrated parameters are NaN, not 0, so they stay distinguishable.
"""

from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from corrosion_risk.schemas import DatapointResult


SUMMARY_COLUMNS = [
    "datapoint_id",
    "sequential_id",
    "name",
    "timestamp",
    "status",
    "class",
    "stress_label",
    "missing_count",
]

# Prefix for output columns that would shadow a summary column
OUTPUT_COLUMN_PREFIX = "output_"


def output_column(name: str) -> str:
    """Frame column holding output `name`."""
    if name in SUMMARY_COLUMNS:
        return f"{OUTPUT_COLUMN_PREFIX}{name}"
    return name


def results_to_frame(results: Iterable[DatapointResult]) -> pd.DataFrame:
    """
    One row per datapoint: identity, outputs, classification.

    Output columns follow the order in which outputs first appear; an
    output named like a summary column is prefixed (see output_column).
    """
    rows = []
    output_names: List[str] = []
    for result in results:
        dp = result.datapoint
        row = {
            "datapoint_id": dp.id,
            "sequential_id": dp.sequential_id,
            "name": dp.name,
            "timestamp": dp.timestamp,
            "status": result.status.value,
            "class": result.classification.class_code if result.classification else None,
            "stress_label": result.classification.stress_label if result.classification else None,
            "missing_count": len(result.missing_parameters),
        }
        for name, value in result.outputs.items():
            column = output_column(name)
            if column not in output_names:
                output_names.append(column)
            row[column] = value
        rows.append(row)

    columns = SUMMARY_COLUMNS[:4] + output_names + SUMMARY_COLUMNS[4:]
    df = pd.DataFrame(rows, columns=columns)
    for name in output_names:
        df[name] = pd.to_numeric(df[name], errors="coerce")
    return df


def ratings_frame(
    results: Iterable[DatapointResult],
    codes: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Datapoints x parameter codes matrix of ratings (NaN = unrated).

    Args:
        results: Evaluation results
        codes: Column order (default: sorted union of rated codes)
    """
    results = list(results)
    if codes is None:
        codes = sorted({code for r in results for code in r.ratings}, key=_code_sort_key)

    index = [r.datapoint.id for r in results]
    matrix = np.full((len(results), len(codes)), np.nan)
    for i, result in enumerate(results):
        for j, code in enumerate(codes):
            if code in result.ratings:
                matrix[i, j] = result.ratings[code]

    return pd.DataFrame(matrix, index=pd.Index(index, name="datapoint_id"), columns=codes)


def class_summary(frame: pd.DataFrame) -> pd.Series:
    """Number of datapoints per risk class (unclassified rows excluded)."""
    if frame.empty or "class" not in frame.columns:
        return pd.Series(dtype="int64", name="count")
    counts = frame["class"].dropna().value_counts().sort_index()
    counts.name = "count"
    return counts.astype("int64")


def _code_sort_key(code: str):
    """Z2 before Z10; non-Z codes after, alphabetically."""
    if code[:1].upper() == "Z" and code[1:].isdigit():
        return (0, int(code[1:]), code)
    return (1, 0, code)
