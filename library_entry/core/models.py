"""
Data models for entry scoring and occupancy tracking.

These models represent scored submissions and accepted events
in a format suitable for API responses and persistence.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from .constants import Decision, EntryKind, GpsZone


class EntryValidationError(ValueError):
    """Raised when an entry submission is malformed."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SignalScores:
    """Per-signal sub-scores (0-100) kept for audit."""

    gps: int = 0
    wifi: int = 0
    motion: int = 0
    missing: tuple[str, ...] = ()
    distance_meters: Optional[float] = None
    zone: GpsZone = GpsZone.UNKNOWN

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "gps": self.gps,
            "wifi": self.wifi,
            "motion": self.motion,
            "missing": list(self.missing),
            "distance_meters": (
                round(self.distance_meters) if self.distance_meters is not None else None
            ),
            "zone": self.zone.value,
        }


@dataclass(frozen=True)
class ConfidenceResult:
    """Outcome of scoring one submission."""

    total: int
    signals: SignalScores
    auto_logged: bool
    accepted: bool
    decision: Decision

    @property
    def gps(self) -> int:
        return self.signals.gps

    @property
    def wifi(self) -> int:
        return self.signals.wifi

    @property
    def motion(self) -> int:
        return self.signals.motion

    def to_dict(self) -> dict:
        """Convert to the client-facing confidence breakdown."""
        return {
            "total": self.total,
            "gps": self.gps,
            "wifi": self.wifi,
            "motion": self.motion,
            "details": {
                "distanceMeters": self.signals.to_dict()["distance_meters"],
                "zone": self.signals.zone.value,
                "missing": list(self.signals.missing),
            },
        }


@dataclass(frozen=True)
class EntryEvent:
    """An accepted entry or exit. Never mutated after creation."""

    subject_id: str
    kind: EntryKind
    confidence: int
    auto_logged: bool
    signals: SignalScores = field(default_factory=SignalScores)
    space_id: str = "main-library"
    manual_confirmed: bool = False
    timestamp: datetime = field(default_factory=utcnow)
    event_id: UUID = field(default_factory=uuid4)

    # Raw inputs, retained for audit
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    wifi_ssid: Optional[str] = None
    speed_kmh: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": str(self.event_id),
            "userId": self.subject_id,
            "spaceId": self.space_id,
            "entryType": self.kind.value,
            "confidenceScore": self.confidence,
            "autoLogged": self.auto_logged,
            "manualConfirmed": self.manual_confirmed,
            "timestamp": self.timestamp.isoformat(),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "wifiSSID": self.wifi_ssid,
            "speedKmh": self.speed_kmh,
            "signals": self.signals.to_dict(),
        }


@dataclass
class EntryRequest:
    """A raw entry submission, prior to validation."""

    subject_id: str
    entry_type: Optional[str]
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    wifi_ssid: Optional[str] = None
    speed_kmh: Optional[float] = None
    manual_confirm: bool = False
    space_id: Optional[str] = None


@dataclass
class EntrySubmission:
    """Result of submitting an entry request."""

    decision: Decision
    confidence: Optional[ConfidenceResult] = None
    event: Optional[EntryEvent] = None
    warnings: list[str] = field(default_factory=list)
    message: str = ""
    details: dict = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.event is not None

    @property
    def auto_logged(self) -> bool:
        return self.event.auto_logged if self.event else False
