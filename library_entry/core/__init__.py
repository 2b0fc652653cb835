"""
Core module - Configuration, constants, and models.
"""

from .config import settings, Settings, get_settings
from .constants import Decision, EntryKind, GpsZone, Signal
from .models import (
    ConfidenceResult,
    EntryEvent,
    EntryRequest,
    EntrySubmission,
    EntryValidationError,
    SignalScores,
)

__all__ = [
    "settings",
    "Settings",
    "get_settings",
    "Decision",
    "EntryKind",
    "GpsZone",
    "Signal",
    # Models
    "ConfidenceResult",
    "EntryEvent",
    "EntryRequest",
    "EntrySubmission",
    "EntryValidationError",
    "SignalScores",
]
