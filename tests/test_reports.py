"""
Result Table Tests

Tests verify:
- One row per datapoint with output and class columns
- Unrated parameters appear as NaN in the rating matrix
- Class summary counts
"""

import numpy as np
import pandas as pd

from corrosion_risk.reports import class_summary, output_column, ratings_frame, results_to_frame
from corrosion_risk.rules import evaluate_datapoints
from corrosion_risk.schemas import Datapoint, Norm, NormParameter, OutputDefinition, RatingRange
from corrosion_risk.standards import din50929_norm, din50929_parameters


def sample_results():
    datapoints = [
        Datapoint(id="a", sequential_id=1, values={
            "Z1": "25", "Z2": "120", "Z3": "18", "Z4": "7.1", "Z5": "1.5",
            "Z6": "6", "Z7": "2", "Z8": "1", "Z9": "2", "Z10": "never",
        }),
        Datapoint(id="b", sequential_id=2, values={"Z1": "8", "Z2": "650"}),
        Datapoint(id="c", sequential_id=3, values={
            "Z1": "impurities", "Z2": "15", "Z3": "45", "Z4": "4.5", "Z5": "12",
            "Z6": "0.5", "Z7": "12", "Z8": "6", "Z9": "40", "Z10": "intermittent",
        }),
    ]
    return evaluate_datapoints(datapoints, din50929_norm(), din50929_parameters()).results


class TestResultsFrame:
    """Test results_to_frame."""

    def test_columns_and_rows(self):
        df = results_to_frame(sample_results())
        assert list(df.columns) == [
            "datapoint_id", "sequential_id", "name", "timestamp",
            "B0",
            "status", "class", "stress_label", "missing_count",
        ]
        assert list(df["datapoint_id"]) == ["a", "b", "c"]
        assert list(df["B0"]) == [2, 0, -36]
        assert list(df["class"]) == ["Ia", "Ia", "III"]
        assert list(df["missing_count"]) == [0, 8, 0]

    def test_output_named_like_summary_column(self):
        norm = Norm(
            id="n",
            name="Clashing outputs",
            parameters=[NormParameter(
                parameter_id="p1",
                parameter_code="Z1",
                rating_ranges=[RatingRange(min=0, rating=3)],
            )],
            output_config=[
                OutputDefinition(name="B0", formula="values.Z1"),
                OutputDefinition(name="status", formula="values.Z1 * 2"),
                OutputDefinition(name="class", formula="values.Z1 * 3"),
            ],
        )
        batch = evaluate_datapoints([Datapoint(id="a", name="Pit 1", values={"Z1": "1"})], norm)
        df = results_to_frame(batch.results)

        row = df.iloc[0]
        assert row["status"] == "ok"
        assert row["class"] == "Ia"
        assert row["name"] == "Pit 1"
        assert row["output_status"] == 6
        assert row["output_class"] == 9
        assert output_column("B0") == "B0"
        assert output_column("name") == "output_name"

    def test_empty(self):
        df = results_to_frame([])
        assert df.empty
        assert "class" in df.columns


class TestRatingsFrame:
    """Test ratings_frame."""

    def test_unrated_is_nan(self):
        df = ratings_frame(sample_results())
        assert list(df.columns) == [f"Z{i}" for i in range(1, 11)]
        assert df.index.name == "datapoint_id"
        assert df.loc["b", "Z1"] == 4
        assert np.isnan(df.loc["b", "Z3"])
        assert df.loc["c", "Z1"] == -12

    def test_explicit_codes(self):
        df = ratings_frame(sample_results(), ["Z2", "Z15"])
        assert list(df.columns) == ["Z2", "Z15"]
        assert df["Z15"].isna().all()


class TestClassSummary:
    """Test class_summary."""

    def test_counts(self):
        summary = class_summary(results_to_frame(sample_results()))
        assert summary.to_dict() == {"III": 1, "Ia": 2}
        assert summary.name == "count"

    def test_empty_frame(self):
        summary = class_summary(pd.DataFrame())
        assert summary.empty
