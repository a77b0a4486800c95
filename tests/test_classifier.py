"""
Classifier Tests

Tests verify:
- DIN 50929-3 boundaries (lower bound inclusive)
- Custom threshold tables
- Label injection
- Table validation
"""

import pytest

from corrosion_risk.rules.classifier import DIN50929_BANDS, classify, validate_bands
from corrosion_risk.schemas import ClassificationBand


class TestDinClassification:
    """Test default DIN 50929-3 table."""

    @pytest.mark.parametrize("score, expected", [
        (12, "Ia"),
        (0, "Ia"),
        (-0.01, "Ib"),
        (-4, "Ib"),
        (-4.01, "II"),
        (-10, "II"),
        (-10.01, "III"),
        (-36, "III"),
    ])
    def test_boundaries(self, score, expected):
        assert classify(score).class_code == expected

    def test_stress_labels(self):
        assert classify(1).stress_label == "Very low"
        assert classify(-2).stress_label == "Low"
        assert classify(-6).stress_label == "Medium"
        assert classify(-20).stress_label == "High"

    def test_serialised_with_class_key(self):
        data = classify(-2).model_dump()
        assert data == {"class": "Ib", "stress_label": "Low"}


class TestCustomBands:
    """Test caller-supplied tables and labels."""

    def test_custom_table(self):
        bands = [
            ClassificationBand(lower_bound=10, class_code="A", stress_label="Safe"),
            ClassificationBand(lower_bound=None, class_code="B", stress_label="Unsafe"),
        ]
        assert classify(10, bands).class_code == "A"
        assert classify(9.9, bands).class_code == "B"

    def test_label_override(self):
        result = classify(-2, labels={"Ib": "Gering"})
        assert result.class_code == "Ib"
        assert result.stress_label == "Gering"

    def test_label_override_for_other_class_ignored(self):
        assert classify(5, labels={"III": "Hoch"}).stress_label == "Very low"


class TestUnusableTables:
    """classify refuses tables that cannot classify every score."""

    def test_empty_table(self):
        with pytest.raises(ValueError):
            classify(-2, [])

    def test_no_catch_all_band(self):
        bands = [ClassificationBand(lower_bound=0, class_code="A", stress_label="a")]
        with pytest.raises(ValueError):
            classify(-50, bands)

    def test_ascending_table(self):
        bands = [
            ClassificationBand(lower_bound=-10, class_code="II", stress_label="Medium"),
            ClassificationBand(lower_bound=0, class_code="Ia", stress_label="Very low"),
            ClassificationBand(lower_bound=None, class_code="III", stress_label="High"),
        ]
        with pytest.raises(ValueError):
            classify(5, bands)


class TestBandValidation:
    """Test validate_bands."""

    def test_din_table_is_valid(self):
        validate_bands(DIN50929_BANDS)

    def test_empty_table(self):
        with pytest.raises(ValueError):
            validate_bands([])

    def test_non_descending(self):
        bands = [
            ClassificationBand(lower_bound=-4, class_code="A", stress_label="a"),
            ClassificationBand(lower_bound=0, class_code="B", stress_label="b"),
            ClassificationBand(lower_bound=None, class_code="C", stress_label="c"),
        ]
        with pytest.raises(ValueError):
            validate_bands(bands)

    def test_missing_catch_all(self):
        bands = [ClassificationBand(lower_bound=0, class_code="A", stress_label="a")]
        with pytest.raises(ValueError):
            validate_bands(bands)

    def test_catch_all_not_last(self):
        bands = [
            ClassificationBand(lower_bound=None, class_code="A", stress_label="a"),
            ClassificationBand(lower_bound=0, class_code="B", stress_label="b"),
        ]
        with pytest.raises(ValueError):
            validate_bands(bands)
