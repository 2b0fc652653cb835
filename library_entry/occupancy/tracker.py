"""
Occupancy tracking for a single physical space.

Maintains who is inside from a stream of accepted entry/exit events.
Each subject runs a two-state machine:

    OUTSIDE ──entry──► INSIDE
    INSIDE  ──exit───► OUTSIDE

Repeated entries and exits are no-ops. Sensor-driven clients routinely
duplicate or drop events, so odd sequences are logged, never raised.
"""

import asyncio
import bisect
import logging
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from ..core.constants import EntryKind
from ..core.models import EntryEvent

logger = logging.getLogger("library.entry.occupancy")


class SubjectState(str, Enum):
    """Per-subject presence state."""

    OUTSIDE = "outside"
    INSIDE = "inside"


class OccupancyTracker:
    """
    Roster of subjects inside one space.

    All mutations go through ``lock``. Mutating methods never await, so
    synchronous readers always see a consistent snapshot.
    """

    def __init__(self, space_id: str):
        self.space_id = space_id
        self._lock = asyncio.Lock()
        self._inside: dict[str, datetime] = {}  # subject_id -> entered at
        self._history: dict[str, list[EntryEvent]] = {}
        self._seen_ids: set[UUID] = set()

    @property
    def lock(self) -> asyncio.Lock:
        """Lock serializing all mutations for this space."""
        return self._lock

    # === Mutation ===

    async def apply(self, event: EntryEvent) -> bool:
        """
        Apply an accepted event.

        Returns:
            True if the roster changed
        """
        async with self._lock:
            return self.record(event)

    def record(self, event: EntryEvent) -> bool:
        """Apply an event. The caller must hold ``lock``."""
        if event.space_id != self.space_id:
            raise ValueError(
                f"Event for space {event.space_id} applied to tracker {self.space_id}"
            )

        if event.event_id in self._seen_ids:
            logger.debug("Ignoring replayed event %s", event.event_id)
            return False
        self._seen_ids.add(event.event_id)

        history = self._history.setdefault(event.subject_id, [])
        in_order = not history or history[-1].timestamp <= event.timestamp
        bisect.insort_right(history, event, key=lambda e: e.timestamp)

        if not in_order:
            logger.info(
                "Out-of-order %s for %s at %s, recomputing state",
                event.kind.value,
                event.subject_id,
                event.timestamp.isoformat(),
            )

        return self._settle(event.subject_id, history[-1])

    def _settle(self, subject_id: str, latest: EntryEvent) -> bool:
        """Set the subject's state from its latest event."""
        was_inside = subject_id in self._inside

        if latest.kind == EntryKind.ENTRY:
            if was_inside:
                logger.debug("Subject %s already inside %s (no-op)", subject_id, self.space_id)
                return False
            self._inside[subject_id] = latest.timestamp
            logger.info(
                "Subject %s entered %s (occupancy: %d)",
                subject_id,
                self.space_id,
                len(self._inside),
            )
            return True

        if not was_inside:
            logger.debug("Subject %s already outside %s (no-op)", subject_id, self.space_id)
            return False
        del self._inside[subject_id]
        logger.info(
            "Subject %s left %s (occupancy: %d)",
            subject_id,
            self.space_id,
            len(self._inside),
        )
        return True

    # === Reads ===

    def current_occupancy(self) -> int:
        """Number of subjects inside."""
        return len(self._inside)

    def roster(self) -> dict[str, datetime]:
        """Subjects inside, mapped to the time they entered."""
        return dict(self._inside)

    def is_inside(self, subject_id: str) -> bool:
        return subject_id in self._inside

    def state_of(self, subject_id: str) -> SubjectState:
        return SubjectState.INSIDE if subject_id in self._inside else SubjectState.OUTSIDE

    def history_for(self, subject_id: str) -> list[EntryEvent]:
        """A subject's accepted events, oldest first."""
        return list(self._history.get(subject_id, ()))

    def last_event_for(self, subject_id: str) -> Optional[EntryEvent]:
        history = self._history.get(subject_id)
        return history[-1] if history else None

    def subjects(self) -> list[str]:
        """All subjects with at least one accepted event."""
        return list(self._history.keys())
