"""
Reports Module — Tabular Views of Evaluation Results

Public API:
- results_to_frame: One row per datapoint (outputs + class)
- ratings_frame: Datapoint x parameter rating matrix
- class_summary: Datapoint count per risk class
- output_column: Frame column name of an output
"""

from .tables import class_summary, output_column, ratings_frame, results_to_frame

__all__ = [
    "class_summary",
    "output_column",
    "ratings_frame",
    "results_to_frame",
]
