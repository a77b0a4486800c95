"""
Norm Assessor Tests

Tests verify:
- Full pipeline: raw values -> ratings -> B0 -> class
- Deterministic results
- NOT_CONFIGURED for norms without outputs
- Missing-parameter diagnostics
- Batch isolation of failing datapoints
- Ratings refresh without mutating the input
"""

from unittest.mock import patch

import pytest

from corrosion_risk.rules.assessor import (
    NormAssessor,
    classification_table,
    evaluate_datapoint,
    evaluate_datapoints,
    find_missing_parameters,
    primary_score,
    refresh_ratings,
    values_by_code,
)
from corrosion_risk.rules.classifier import DIN50929_BANDS
from corrosion_risk.schemas import (
    ClassificationBand,
    Datapoint,
    EvaluationStatus,
    Norm,
    NormParameter,
    OutputDefinition,
    RatingRange,
)
from corrosion_risk.standards import (
    DIN50929_EXPECTED_CODES,
    din50929_norm,
    din50929_parameters,
)


def two_parameter_norm(outputs=None):
    """Norm with Z1/Z2 bands and B0 = Z1 + Z2."""
    return Norm(
        id="mini",
        name="Mini norm",
        parameters=[
            NormParameter(
                parameter_id="p1",
                parameter_code="Z1",
                rating_ranges=[
                    RatingRange(min=0, max=10, rating=4),
                    RatingRange(min=10, max=None, rating=0),
                ],
            ),
            NormParameter(
                parameter_id="p2",
                parameter_code="Z2",
                rating_ranges=[
                    RatingRange(min=0, max=10, rating=-6),
                    RatingRange(min=10, max=None, rating=2),
                ],
            ),
        ],
        output_config=(
            outputs if outputs is not None
            else [OutputDefinition(name="B0", formula="values.Z1 + values.Z2")]
        ),
    )


def full_din_values():
    return {
        "Z1": "25", "Z2": "120", "Z3": "18", "Z4": "7.1", "Z5": "1.5",
        "Z6": "6", "Z7": "2", "Z8": "1", "Z9": "2", "Z10": "never",
    }


class TestEvaluateDatapoint:
    """Test single-datapoint pipeline."""

    def test_b0_sum_classified_low(self):
        """Z1 -> 4, Z2 -> -6 gives B0 = -2, class Ib "Low"."""
        dp = Datapoint(id="dp", values={"Z1": "5", "Z2": "3"})
        result = evaluate_datapoint(dp, two_parameter_norm())

        assert result.status == EvaluationStatus.OK
        assert result.ratings == {"Z1": 4, "Z2": -6}
        assert result.outputs == {"B0": -2}
        assert result.classification.class_code == "Ib"
        assert result.classification.stress_label == "Low"
        assert result.formula_errors == {}

    def test_deterministic(self):
        dp = Datapoint(id="dp", values=full_din_values())
        norm = din50929_norm()
        first = evaluate_datapoint(dp, norm, din50929_parameters())
        second = evaluate_datapoint(dp, norm, din50929_parameters())
        assert first == second

    def test_din_full_datapoint(self):
        dp = Datapoint(id="dp", values=full_din_values())
        result = evaluate_datapoint(dp, din50929_norm(), din50929_parameters())
        assert result.outputs == {"B0": 2}
        assert result.classification.class_code == "Ia"
        assert result.missing_parameters == []

    def test_impurities_drive_class_high(self):
        values = full_din_values()
        values["Z1"] = "impurities"
        result = evaluate_datapoint(Datapoint(id="dp", values=values), din50929_norm())
        assert result.ratings["Z1"] == -12
        assert result.outputs["B0"] == -12
        assert result.classification.class_code == "III"

    def test_failed_b0_defaults_to_zero(self):
        dp = Datapoint(id="dp", values={"Z1": "5"})
        result = evaluate_datapoint(dp, two_parameter_norm())
        assert result.outputs == {"B0": 0}
        assert "B0" in result.formula_errors
        assert result.classification.class_code == "Ia"
        assert result.missing_parameters == ["Z2"]

    def test_not_configured(self):
        dp = Datapoint(id="dp", values={"Z1": "5", "Z2": "3"})
        result = evaluate_datapoint(dp, two_parameter_norm(outputs=[]))
        assert result.status == EvaluationStatus.NOT_CONFIGURED
        assert result.outputs == {}
        assert result.classification is None
        assert result.ratings == {"Z1": 4, "Z2": -6}

    def test_values_keyed_by_parameter_id(self):
        dp = Datapoint(id="dp", values={"p1": "5", "p2": "3"})
        result = evaluate_datapoint(dp, two_parameter_norm())
        assert result.outputs == {"B0": -2}

    def test_primary_output_missing_scores_zero(self):
        norm = two_parameter_norm([OutputDefinition(name="B1", formula="values.Z1 - 100")])
        dp = Datapoint(id="dp", values={"Z1": "5", "Z2": "3"})
        result = evaluate_datapoint(dp, norm)
        assert result.outputs == {"B1": -96}
        assert result.classification.class_code == "Ia"

    def test_norm_bands_used(self):
        norm = two_parameter_norm()
        norm.classification_bands = [
            ClassificationBand(lower_bound=0, class_code="OK", stress_label="Fine"),
            ClassificationBand(lower_bound=None, class_code="BAD", stress_label="Poor"),
        ]
        dp = Datapoint(id="dp", values={"Z1": "5", "Z2": "3"})
        assert evaluate_datapoint(dp, norm).classification.class_code == "BAD"

    def test_labels_injected(self):
        dp = Datapoint(id="dp", values={"Z1": "5", "Z2": "3"})
        result = evaluate_datapoint(dp, two_parameter_norm(), labels={"Ib": "Gering"})
        assert result.classification.stress_label == "Gering"


class TestMissingParameters:
    """Test missing-parameter diagnostics."""

    def test_din_expected_codes(self):
        missing = find_missing_parameters({"Z1": "8", "Z2": "650"}, DIN50929_EXPECTED_CODES)
        assert missing == ["Z3", "Z4", "Z5", "Z6", "Z7", "Z8", "Z9", "Z10", "Z15"]

    def test_blank_counts_as_missing(self):
        assert find_missing_parameters({"Z1": " ", "Z2": "1"}, ["Z1", "Z2"]) == ["Z1"]

    def test_explicit_expected_codes(self):
        dp = Datapoint(id="dp", values={"Z1": "8", "Z2": "650"})
        result = evaluate_datapoint(dp, din50929_norm(), expected_codes=DIN50929_EXPECTED_CODES)
        assert result.missing_parameters[-1] == "Z15"
        assert len(result.missing_parameters) == 9


class TestHelpers:
    """Test key mapping and primary score lookup."""

    def test_code_wins_over_id(self):
        keyed = values_by_code({"p1": "1", "Z1": "2"}, two_parameter_norm())
        assert keyed == {"Z1": "2"}
        keyed = values_by_code({"Z1": "2", "p1": "1"}, two_parameter_norm())
        assert keyed == {"Z1": "2"}

    def test_primary_score_case_insensitive(self):
        assert primary_score({"b0": -3}) == -3
        assert primary_score({"B0": -3, "b0": 5}) == -3
        assert primary_score({"B1": -3}) == 0


class TestBatchEvaluation:
    """Test evaluate_datapoints."""

    def test_results_per_datapoint(self):
        datapoints = [
            Datapoint(id="a", values={"Z1": "5", "Z2": "3"}),
            Datapoint(id="b", values={"Z1": "50", "Z2": "50"}),
        ]
        batch = evaluate_datapoints(datapoints, two_parameter_norm())
        assert batch.norm_id == "mini"
        assert batch.status == EvaluationStatus.OK
        assert [r.outputs["B0"] for r in batch.results] == [-2, 2]
        assert batch.configuration_issues == []

    def test_not_configured_batch(self):
        batch = evaluate_datapoints(
            [Datapoint(id="a", values={"Z1": "5"})],
            two_parameter_norm(outputs=[]),
        )
        assert batch.status == EvaluationStatus.NOT_CONFIGURED
        assert batch.configuration_issues[0].code == "no_outputs"
        assert batch.results[0].classification is None

    def test_failing_datapoint_isolated(self, caplog):
        import corrosion_risk.rules.assessor as assessor

        real = assessor.resolve_ratings

        def flaky(values, rules, *args, **kwargs):
            if values.get("Z1") == "boom":
                raise RuntimeError("corrupt record")
            return real(values, rules, *args, **kwargs)

        datapoints = [
            Datapoint(id="a", values={"Z1": "5", "Z2": "3"}),
            Datapoint(id="bad", values={"Z1": "boom"}),
            Datapoint(id="c", values={"Z1": "50", "Z2": "50"}),
        ]
        with patch.object(assessor, "resolve_ratings", side_effect=flaky):
            batch = evaluate_datapoints(datapoints, two_parameter_norm())

        assert [r.datapoint.id for r in batch.results] == ["a", "c"]
        assert "bad" in caplog.text


class TestNormMisconfiguration:
    """Bad formulas and band tables never abort a batch."""

    def test_oversized_formula_in_batch(self):
        norm = two_parameter_norm([
            OutputDefinition(name="B0", formula="values.Z1" + " + 1" * 5000),
            OutputDefinition(name="B1", formula="values.Z1 + values.Z2"),
        ])
        batch = evaluate_datapoints([Datapoint(id="a", values={"Z1": "5", "Z2": "3"})], norm)

        assert batch.status == EvaluationStatus.OK
        assert [i.code for i in batch.configuration_issues] == ["formula_syntax"]
        result = batch.results[0]
        assert result.outputs == {"B0": 0, "B1": -2}
        assert "B0" in result.formula_errors

    @pytest.mark.parametrize("bands", [
        [],
        [
            ClassificationBand(lower_bound=-10, class_code="II", stress_label="Medium"),
            ClassificationBand(lower_bound=0, class_code="Ia", stress_label="Very low"),
            ClassificationBand(lower_bound=None, class_code="III", stress_label="High"),
        ],
    ])
    def test_invalid_norm_bands_fall_back_to_din(self, bands):
        norm = two_parameter_norm()
        norm.classification_bands = bands
        datapoints = [
            Datapoint(id="a", values={"Z1": "5", "Z2": "3"}),
            Datapoint(id="b", values={"Z1": "50", "Z2": "50"}),
        ]
        batch = evaluate_datapoints(datapoints, norm)

        assert [i.code for i in batch.configuration_issues] == ["invalid_classification_bands"]
        assert [r.classification.class_code for r in batch.results] == ["Ib", "Ia"]

    def test_invalid_explicit_bands_reported(self):
        bands = [ClassificationBand(lower_bound=0, class_code="A", stress_label="a")]
        batch = evaluate_datapoints(
            [Datapoint(id="a", values={"Z1": "5", "Z2": "3"})],
            two_parameter_norm(),
            bands=bands,
        )
        assert [i.code for i in batch.configuration_issues] == ["invalid_classification_bands"]
        assert batch.results[0].classification.class_code == "Ib"

    def test_classification_table_precedence(self):
        norm = two_parameter_norm()
        assert classification_table(norm) is DIN50929_BANDS
        custom = [ClassificationBand(lower_bound=None, class_code="X", stress_label="x")]
        norm.classification_bands = custom
        assert classification_table(norm) is custom
        assert classification_table(norm, DIN50929_BANDS) is DIN50929_BANDS


class TestRefreshRatings:
    """Test refresh_ratings / NormAssessor."""

    def test_refresh_returns_copy(self):
        dp = Datapoint(id="dp", values={"Z1": "5", "Z2": "3"}, ratings={"Z1": 99})
        refreshed = refresh_ratings(dp, two_parameter_norm())
        assert refreshed.ratings == {"Z1": 4, "Z2": -6}
        assert dp.ratings == {"Z1": 99}

    def test_assessor_wraps_pipeline(self):
        assessor = NormAssessor(din50929_norm(), din50929_parameters())
        assert assessor.is_configured

        dp = Datapoint(id="dp", values=full_din_values())
        assert assessor.assess(dp).outputs == {"B0": 2}

        batch = assessor.assess_many([dp, dp])
        assert len(batch.results) == 2

        assert assessor.refresh(dp).ratings["Z1"] == 2

    @pytest.mark.parametrize("raw", ["", "n/a", "-5"])
    def test_unrated_values_not_cached(self, raw):
        dp = Datapoint(id="dp", values={"Z1": raw, "Z2": "3"})
        assert "Z1" not in refresh_ratings(dp, two_parameter_norm()).ratings
