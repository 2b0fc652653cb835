"""
Unit tests for ConfidenceScorer.

Covers per-signal scoring, weight redistribution over present signals,
and the accept / borderline / reject decision bands.
"""

import pytest

from library_entry.core.config import ScoringConfig
from library_entry.core.constants import Decision, GpsZone
from library_entry.core.models import EntryValidationError
from library_entry.scoring import ConfidenceScorer


@pytest.fixture
def scorer(scoring_config):
    return ConfidenceScorer(scoring_config)


class TestSignalScores:
    """Individual signal scoring."""

    def test_gps_inside_radius_is_full(self, scorer):
        assert scorer.gps_score(0.0) == (100.0, GpsZone.INSIDE)
        assert scorer.gps_score(50.0) == (100.0, GpsZone.INSIDE)

    def test_gps_decays_linearly_to_outside_radius(self, scorer):
        score, zone = scorer.gps_score(125.0)
        assert score == pytest.approx(50.0)
        assert zone == GpsZone.TRANSITION

    def test_gps_outside_radius_is_zero(self, scorer):
        assert scorer.gps_score(200.0) == (0.0, GpsZone.OUTSIDE)
        assert scorer.gps_score(5000.0) == (0.0, GpsZone.OUTSIDE)

    def test_wifi_match_is_case_sensitive(self, scorer):
        assert scorer.wifi_score("LibraryWiFi") == 100.0
        assert scorer.wifi_score("librarywifi") == 0.0
        assert scorer.wifi_score("") == 0.0

    def test_motion_walking_is_full(self, scorer):
        assert scorer.motion_score(0.0) == 100.0
        assert scorer.motion_score(2.5) == 100.0

    def test_motion_decays_above_ceiling(self, scorer):
        assert scorer.motion_score(12.5) == pytest.approx(50.0)
        assert scorer.motion_score(20.0) == 0.0
        assert scorer.motion_score(80.0) == 0.0


class TestTotal:
    """Weighted totals."""

    def test_perfect_signals_score_100(self, scorer):
        result = scorer.score(gps_distance_meters=0.0, observed_ssid="LibraryWiFi", speed_kmh=2.5)
        assert result.total == 100
        assert result.auto_logged is True
        assert result.accepted is True
        assert result.decision == Decision.AUTO_LOGGED
        assert (result.gps, result.wifi, result.motion) == (100, 100, 100)
        assert result.signals.missing == ()

    def test_far_away_wrong_network_driving_is_rejected(self, scorer):
        result = scorer.score(gps_distance_meters=5000.0, observed_ssid="CoffeeShop", speed_kmh=15.0)
        # Only the motion decay contributes: 33.3 * 20 / 100
        assert result.total == 7
        assert result.accepted is False
        assert result.decision == Decision.CONFIDENCE_TOO_LOW

    def test_missing_signal_weight_is_redistributed(self, scorer):
        result = scorer.score(gps_distance_meters=10.0, observed_ssid="LibraryWiFi")
        assert result.total == 100
        assert result.signals.missing == ("motion",)
        assert result.motion == 0

    def test_single_present_signal_carries_full_weight(self, scorer):
        result = scorer.score(observed_ssid="LibraryWiFi")
        assert result.total == 100
        assert set(result.signals.missing) == {"gps", "motion"}
        assert result.signals.zone == GpsZone.UNKNOWN

    def test_redistribution_uses_configured_ratio(self, scorer):
        # GPS full, WiFi miss, motion absent: 100 * 40 / (40 + 40)
        result = scorer.score(gps_distance_meters=0.0, observed_ssid="Guest")
        assert result.total == 50
        assert result.decision == Decision.MANUAL_CONFIRMATION_REQUIRED

    def test_all_signals_absent_scores_zero(self, scorer):
        result = scorer.score()
        assert result.total == 0
        assert result.accepted is False
        assert result.decision == Decision.CONFIDENCE_TOO_LOW

    def test_all_signals_absent_with_manual_confirm_is_accepted(self, scorer):
        result = scorer.score(manual_confirm=True)
        assert result.total == 0
        assert result.accepted is True
        assert result.auto_logged is False
        assert result.decision == Decision.MANUAL_CONFIRMED

    def test_total_stays_in_bounds(self, scorer):
        for distance in (None, 0.0, 49.0, 120.0, 199.0, 10_000.0):
            for ssid in (None, "LibraryWiFi", "Other"):
                for speed in (None, 0.0, 6.0, 19.9, 120.0):
                    result = scorer.score(distance, ssid, speed)
                    assert 0 <= result.total <= 100

    def test_scoring_is_deterministic(self, scorer):
        first = scorer.score(gps_distance_meters=80.0, observed_ssid="Guest", speed_kmh=7.0)
        second = scorer.score(gps_distance_meters=80.0, observed_ssid="Guest", speed_kmh=7.0)
        assert first == second


class TestDecision:
    """Decision bands."""

    def test_borderline_requires_confirmation(self, scorer):
        assert scorer.decide(65) == Decision.MANUAL_CONFIRMATION_REQUIRED
        assert scorer.decide(50) == Decision.MANUAL_CONFIRMATION_REQUIRED
        assert scorer.decide(79) == Decision.MANUAL_CONFIRMATION_REQUIRED

    def test_borderline_with_confirmation_is_accepted(self, scorer):
        assert scorer.decide(65, manual_confirm=True) == Decision.MANUAL_CONFIRMED

    def test_threshold_is_inclusive(self, scorer):
        assert scorer.decide(80) == Decision.AUTO_LOGGED

    def test_below_band_is_too_low(self, scorer):
        assert scorer.decide(49) == Decision.CONFIDENCE_TOO_LOW

    def test_custom_threshold(self):
        scorer = ConfidenceScorer(ScoringConfig(auto_threshold=90, borderline_min=60))
        assert scorer.decide(85) == Decision.MANUAL_CONFIRMATION_REQUIRED
        assert scorer.decide(55) == Decision.CONFIDENCE_TOO_LOW


class TestValidation:
    """Invalid inputs are rejected before scoring."""

    def test_negative_distance_raises(self, scorer):
        with pytest.raises(EntryValidationError):
            scorer.score(gps_distance_meters=-1.0)

    def test_negative_speed_raises(self, scorer):
        with pytest.raises(EntryValidationError):
            scorer.score(speed_kmh=-0.5)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_distance_raises(self, scorer, value):
        with pytest.raises(EntryValidationError):
            scorer.score(gps_distance_meters=value)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_speed_raises(self, scorer, value):
        with pytest.raises(EntryValidationError):
            scorer.score(speed_kmh=value, observed_ssid="LibraryWiFi")
