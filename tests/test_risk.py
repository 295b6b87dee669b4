"""Tests for the NEO risk scorer."""

import pytest

from cosmic_watch.models import RiskLevel
from cosmic_watch.risk import (
    compute_risk_score,
    hazard_term,
    proximity_term,
    risk_level,
    size_term,
)


class TestReferenceScores:
    """Anchor points of the three linear scales."""

    def test_hazard_flag_alone_scores_40(self, make_neo):
        neo = make_neo(hazardous=True, diameter_km=0.0, miss_km="7500000")
        assert compute_risk_score(neo) == 40

    def test_one_km_diameter_saturates_size_term(self, make_neo):
        neo = make_neo(diameter_km=1.0, miss_km="9000000")
        assert compute_risk_score(neo) == 30

    def test_zero_miss_distance_saturates_proximity_term(self, make_neo):
        neo = make_neo(diameter_km=0.0, miss_km="0")
        assert compute_risk_score(neo) == 30

    def test_midpoints_of_both_scales(self, make_neo):
        neo = make_neo(diameter_km=0.5, miss_km="3750000")
        assert size_term(neo) == 15
        assert proximity_term(neo) == 15
        assert compute_risk_score(neo) == 30

    def test_everything_saturated_scores_100(self, make_neo):
        neo = make_neo(hazardous=True, diameter_km=12.0, miss_km="0")
        assert compute_risk_score(neo) == 100


class TestClamping:
    def test_oversized_diameter_caps_at_30(self, make_neo):
        assert size_term(make_neo(diameter_km=40.0)) == 30

    def test_distance_beyond_threshold_floors_at_zero(self, make_neo):
        assert proximity_term(make_neo(miss_km="90000000")) == 0

    def test_negative_distance_caps_at_30(self, make_neo):
        assert proximity_term(make_neo(miss_km="-500")) == 30

    def test_negative_diameter_floors_at_zero(self, make_neo):
        assert size_term(make_neo(diameter_km=-2.0)) == 0

    @pytest.mark.parametrize("diameter_km,miss_km,hazardous", [
        (0.0, "0", False),
        (0.05, "12", True),
        (3.0, "7499999", True),
        (0.999, "8000000", False),
        (100.0, "-1e12", True),
    ])
    def test_score_always_within_bounds(self, make_neo, diameter_km, miss_km, hazardous):
        score = compute_risk_score(make_neo(hazardous=hazardous, diameter_km=diameter_km, miss_km=miss_km))
        assert isinstance(score, int)
        assert 0 <= score <= 100


class TestMalformedInput:
    """Bad numeric fields zero their own term and never raise."""

    def test_unparseable_miss_distance(self, make_neo):
        neo = make_neo(hazardous=True, diameter_km=1.0, miss_km="unknown")
        assert compute_risk_score(neo) == 70

    def test_missing_approach_data(self, make_neo):
        neo = make_neo(hazardous=True, with_approach=False)
        assert proximity_term(neo) == 0
        assert compute_risk_score(neo) == 40

    def test_non_numeric_diameter(self, make_neo):
        neo = make_neo(miss_km="0")
        neo["estimated_diameter"]["kilometers"]["estimated_diameter_max"] = "big"
        assert compute_risk_score(neo) == 30

    def test_nan_and_infinity_are_ignored(self, make_neo):
        neo = make_neo(miss_km="nan")
        neo["estimated_diameter"]["kilometers"]["estimated_diameter_max"] = float("inf")
        assert compute_risk_score(neo) == 0

    def test_hazard_flag_must_be_true_boolean(self, make_neo):
        neo = make_neo()
        neo["is_potentially_hazardous_asteroid"] = "true"
        assert hazard_term(neo) == 0

    @pytest.mark.parametrize("record", [
        {},
        {"estimated_diameter": None, "close_approach_data": None},
        {"estimated_diameter": {"kilometers": []}, "close_approach_data": ["oops"]},
        {"close_approach_data": [{"miss_distance": "far"}]},
    ])
    def test_structurally_broken_records_score_zero(self, record):
        assert compute_risk_score(record) == 0


class TestRounding:
    def test_half_rounds_up(self, make_neo):
        # 0.75 km -> 22.5 points
        neo = make_neo(diameter_km=0.75, with_approach=False)
        assert compute_risk_score(neo) == 23

    def test_deterministic(self, make_neo):
        neo = make_neo(hazardous=True, diameter_km=0.37, miss_km="38000")
        assert compute_risk_score(neo) == compute_risk_score(neo) == 81


class TestRiskLevel:
    @pytest.mark.parametrize("score,level", [
        (0, RiskLevel.LOW),
        (39, RiskLevel.LOW),
        (40, RiskLevel.ELEVATED),
        (74, RiskLevel.ELEVATED),
        (75, RiskLevel.CRITICAL),
        (100, RiskLevel.CRITICAL),
    ])
    def test_bands(self, score, level):
        assert risk_level(score) is level

    def test_band_serialises_as_its_name(self):
        assert risk_level(88).value == "CRITICAL"
        assert RiskLevel("LOW") is RiskLevel.LOW
