"""
Constants and enums for the library entry service.
"""

from enum import Enum


class EntryKind(str, Enum):
    """Direction of a logged crossing."""

    ENTRY = "entry"
    EXIT = "exit"


class Decision(str, Enum):
    """Outcome of an entry submission."""

    AUTO_LOGGED = "auto_logged"
    MANUAL_CONFIRMED = "manual_confirmed"
    MANUAL_CONFIRMATION_REQUIRED = "manual_confirmation_required"
    CONFIDENCE_TOO_LOW = "confidence_too_low"
    RECENT_ENTRY = "recent_entry"
    STILL_IN_ZONE = "still_in_zone"

    @property
    def accepted(self) -> bool:
        return self in (Decision.AUTO_LOGGED, Decision.MANUAL_CONFIRMED)


class GpsZone(str, Enum):
    """GPS band a distance falls into."""

    INSIDE = "inside"
    TRANSITION = "transition"
    OUTSIDE = "outside"
    UNKNOWN = "unknown"  # No GPS signal


class Signal(str, Enum):
    """Independently observed scoring inputs."""

    GPS = "gps"
    WIFI = "wifi"
    MOTION = "motion"


# Client-facing rejection messages
REJECTION_MESSAGES = {
    Decision.MANUAL_CONFIRMATION_REQUIRED: "manual confirmation required",
    Decision.CONFIDENCE_TOO_LOW: "confidence too low",
    Decision.RECENT_ENTRY: "recent entry detected",
    Decision.STILL_IN_ZONE: "still inside the library zone",
}

REJECTION_ERRORS = {
    Decision.MANUAL_CONFIRMATION_REQUIRED: "Manual Confirmation Required",
    Decision.CONFIDENCE_TOO_LOW: "Confidence Too Low",
    Decision.RECENT_ENTRY: "Recent Entry Detected",
    Decision.STILL_IN_ZONE: "Invalid Exit",
}

ACCEPT_MESSAGES = {
    Decision.AUTO_LOGGED: "Entry logged automatically (high confidence)",
    Decision.MANUAL_CONFIRMED: "Entry logged with manual confirmation",
}
