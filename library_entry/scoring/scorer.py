"""
Entry confidence scoring.

Combines three weakly correlated signals into a single 0-100 score:

    GPS distance ──┐
                   ├──► weighted mean over present signals ──► total ──► decision
    WiFi SSID ─────┤
                   │
    Speed (km/h) ──┘

A signal the client did not send drops out of the mean and its weight is
shared among the signals that were sent.
"""

import logging
import math
from typing import Optional

from ..core.config import ScoringConfig, settings
from ..core.constants import Decision, GpsZone, Signal
from ..core.models import ConfidenceResult, EntryValidationError, SignalScores

logger = logging.getLogger("library.entry.scoring")


class ConfidenceScorer:
    """Pure scorer for entry/exit submissions."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or settings.scoring

    # === Per-signal scores ===

    def gps_score(self, distance_meters: float) -> tuple[float, GpsZone]:
        """Score a distance from the reference point."""
        inner = self.config.inside_radius_meters
        outer = self.config.outside_radius_meters

        if distance_meters <= inner:
            return 100.0, GpsZone.INSIDE
        if distance_meters >= outer:
            return 0.0, GpsZone.OUTSIDE

        # Linear decay across the transition band
        progress = (distance_meters - inner) / (outer - inner)
        return 100.0 * (1.0 - progress), GpsZone.TRANSITION

    def wifi_score(self, ssid: str) -> float:
        """Exact, case-sensitive SSID match."""
        return 100.0 if ssid == self.config.expected_ssid else 0.0

    def motion_score(self, speed_kmh: float) -> float:
        """Score speed: walking pace is full, vehicle pace is zero."""
        ceiling = self.config.stationary_speed_kmh
        upper = self.config.max_speed_kmh

        if speed_kmh < ceiling:
            return 100.0
        if speed_kmh >= upper:
            return 0.0
        return 100.0 * (upper - speed_kmh) / (upper - ceiling)

    # === Combined score ===

    def score(
        self,
        gps_distance_meters: Optional[float] = None,
        observed_ssid: Optional[str] = None,
        speed_kmh: Optional[float] = None,
        manual_confirm: bool = False,
    ) -> ConfidenceResult:
        """
        Score a submission and decide whether it may be logged.

        Args:
            gps_distance_meters: Distance from the reference point, or None
            observed_ssid: Network name seen by the client, or None
            speed_kmh: Instantaneous speed, or None
            manual_confirm: Caller asserts presence regardless of score

        Returns:
            ConfidenceResult with sub-scores, total and decision

        Raises:
            EntryValidationError: if distance or speed is negative or not finite
        """
        if gps_distance_meters is not None and not math.isfinite(gps_distance_meters):
            raise EntryValidationError("gps distance must be a finite number")
        if gps_distance_meters is not None and gps_distance_meters < 0:
            raise EntryValidationError("gps distance must be non-negative")
        if speed_kmh is not None and not math.isfinite(speed_kmh):
            raise EntryValidationError("speed must be a finite number")
        if speed_kmh is not None and speed_kmh < 0:
            raise EntryValidationError("speed must be non-negative")

        weights = {
            Signal.GPS: self.config.gps_weight,
            Signal.WIFI: self.config.wifi_weight,
            Signal.MOTION: self.config.motion_weight,
        }
        present: dict[Signal, float] = {}
        zone = GpsZone.UNKNOWN

        if gps_distance_meters is not None:
            present[Signal.GPS], zone = self.gps_score(gps_distance_meters)
        if observed_ssid is not None:
            present[Signal.WIFI] = self.wifi_score(observed_ssid)
        if speed_kmh is not None:
            present[Signal.MOTION] = self.motion_score(speed_kmh)

        weight_sum = sum(weights[s] for s in present)
        if weight_sum > 0:
            raw_total = sum(present[s] * weights[s] for s in present) / weight_sum
        else:
            raw_total = 0.0
        total = max(0, min(100, round(raw_total)))

        signals = SignalScores(
            gps=round(present.get(Signal.GPS, 0.0)),
            wifi=round(present.get(Signal.WIFI, 0.0)),
            motion=round(present.get(Signal.MOTION, 0.0)),
            missing=tuple(s.value for s in Signal if s not in present),
            distance_meters=gps_distance_meters,
            zone=zone,
        )

        decision = self.decide(total, manual_confirm)
        auto_logged = total >= self.config.auto_threshold

        logger.debug(
            "Scored submission: total=%d gps=%d wifi=%d motion=%d missing=%s -> %s",
            total,
            signals.gps,
            signals.wifi,
            signals.motion,
            ",".join(signals.missing) or "none",
            decision.value,
        )

        return ConfidenceResult(
            total=total,
            signals=signals,
            auto_logged=auto_logged,
            accepted=decision.accepted,
            decision=decision,
        )

    def decide(self, total: int, manual_confirm: bool = False) -> Decision:
        """Map a total score to a decision."""
        if total >= self.config.auto_threshold:
            return Decision.AUTO_LOGGED
        if manual_confirm:
            return Decision.MANUAL_CONFIRMED
        if total >= self.config.borderline_min:
            return Decision.MANUAL_CONFIRMATION_REQUIRED
        return Decision.CONFIDENCE_TOO_LOW
