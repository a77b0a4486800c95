"""
Rating Resolver Tests

Tests verify:
- Sparse rating mapping (no entry for unrated values)
- Rule construction and range type precedence
- Selection inference from literal bands
"""

from corrosion_risk.rules.resolver import build_rules, infer_range_type, resolve_ratings
from corrosion_risk.schemas import NormParameter, Parameter, RangeType, RatingRange
from corrosion_risk.standards import din50929_norm, din50929_parameters


def ph_association(range_type=None):
    return NormParameter(
        parameter_id="ph",
        parameter_code="Z4",
        rating_ranges=[
            RatingRange(min=0, max=5, rating=-1),
            RatingRange(min=5, max=None, rating=0),
        ],
        range_type=range_type,
    )


class TestInferRangeType:
    """Test range type inference."""

    def test_numeric_bands_are_range(self):
        assert infer_range_type(ph_association().rating_ranges) == RangeType.RANGE

    def test_literal_bands_are_selection(self):
        bands = [RatingRange(min="A", rating=0), RatingRange(min="B", rating=1)]
        assert infer_range_type(bands) == RangeType.SELECTION

    def test_numeric_text_bands_are_range(self):
        bands = [RatingRange(min="0", max="10", rating=0)]
        assert infer_range_type(bands) == RangeType.RANGE

    def test_empty_is_range(self):
        assert infer_range_type([]) == RangeType.RANGE


class TestBuildRules:
    """Test rule construction."""

    def test_keyed_by_code(self):
        rules = build_rules([ph_association()])
        assert set(rules) == {"Z4"}
        assert rules["Z4"].range_type == RangeType.RANGE

    def test_association_type_wins(self):
        catalogue = [Parameter(id="ph", range_type=RangeType.OPEN)]
        rules = build_rules([ph_association(RangeType.SELECTION)], catalogue)
        assert rules["Z4"].range_type == RangeType.SELECTION

    def test_catalogue_type_used(self):
        catalogue = [Parameter(id="ph", range_type=RangeType.OPEN)]
        rules = build_rules([ph_association()], catalogue)
        assert rules["Z4"].range_type == RangeType.OPEN


class TestResolveRatings:
    """Test value -> rating mapping."""

    def test_sparse_mapping(self):
        rules = build_rules([ph_association()])
        ratings = resolve_ratings({"Z4": "4.5", "Z99": "1"}, rules)
        assert ratings == {"Z4": -1}

    def test_blank_and_malformed_values_skipped(self):
        rules = build_rules([ph_association()])
        assert resolve_ratings({"Z4": ""}, rules) == {}
        assert resolve_ratings({"Z4": "   "}, rules) == {}
        assert resolve_ratings({"Z4": "acidic"}, rules) == {}

    def test_zero_rating_is_kept(self):
        rules = build_rules([ph_association()])
        assert resolve_ratings({"Z4": "7"}, rules) == {"Z4": 0}

    def test_din_norm_rates_every_parameter(self):
        norm = din50929_norm()
        rules = build_rules(norm.parameters, din50929_parameters())
        values = {
            "Z1": "impurities", "Z2": "15", "Z3": "45", "Z4": "4.5", "Z5": "12",
            "Z6": "0.5", "Z7": "12", "Z8": "6", "Z9": "40", "Z10": "intermittent",
        }
        ratings = resolve_ratings(values, rules)
        assert ratings == {
            "Z1": -12, "Z2": -4, "Z3": -2, "Z4": -1, "Z5": -2,
            "Z6": -2, "Z7": -6, "Z8": -2, "Z9": -3, "Z10": -2,
        }
