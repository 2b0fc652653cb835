"""
Database repository for the entry log.
"""

import logging
from typing import Optional

from ..core.constants import EntryKind, GpsZone
from ..core.models import EntryEvent, SignalScores
from .database import get_db_pool

logger = logging.getLogger("library.entry.storage.repository")

_EVENT_COLUMNS = """
    event_id, space_id, user_id, entry_type, latitude, longitude, wifi_ssid,
    speed_kmh, distance_meters, gps_zone, missing_signals, confidence_score,
    gps_confidence, wifi_confidence, motion_confidence, auto_logged,
    manual_confirmed, logged_at
"""


class EntryLogRepository:
    """Repository for accepted entry/exit events."""

    async def insert_event(self, event: EntryEvent) -> bool:
        """
        Persist an accepted event.

        Inserts are keyed on event_id, so replaying an event is harmless.

        Returns:
            True if a new row was written
        """
        pool = get_db_pool()
        status = await pool.execute(
            f"""
            INSERT INTO entry_logs ({_EVENT_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, $17, $18)
            ON CONFLICT (event_id) DO NOTHING
            """,
            event.event_id,
            event.space_id,
            event.subject_id,
            event.kind.value,
            event.latitude,
            event.longitude,
            event.wifi_ssid,
            event.speed_kmh,
            event.signals.distance_meters,
            event.signals.zone.value,
            list(event.signals.missing),
            event.confidence,
            event.signals.gps,
            event.signals.wifi,
            event.signals.motion,
            event.auto_logged,
            event.manual_confirmed,
            event.timestamp,
        )
        # asyncpg returns the command tag, e.g. "INSERT 0 1"
        return status.endswith(" 1")

    async def fetch_history(
        self,
        subject_id: str,
        limit: int = 50,
        offset: int = 0,
        space_id: Optional[str] = None,
    ) -> list[EntryEvent]:
        """Get a subject's events, newest first."""
        pool = get_db_pool()
        if space_id is None:
            rows = await pool.fetch(
                f"""
                SELECT {_EVENT_COLUMNS} FROM entry_logs
                WHERE user_id = $1
                ORDER BY logged_at DESC
                LIMIT $2 OFFSET $3
                """,
                subject_id,
                limit,
                offset,
            )
        else:
            rows = await pool.fetch(
                f"""
                SELECT {_EVENT_COLUMNS} FROM entry_logs
                WHERE user_id = $1 AND space_id = $2
                ORDER BY logged_at DESC
                LIMIT $3 OFFSET $4
                """,
                subject_id,
                space_id,
                limit,
                offset,
            )
        return [self._row_to_event(row) for row in rows]

    async def count_history(self, subject_id: str, space_id: Optional[str] = None) -> int:
        """Count a subject's events."""
        pool = get_db_pool()
        if space_id is None:
            total = await pool.fetchval(
                "SELECT COUNT(*) FROM entry_logs WHERE user_id = $1",
                subject_id,
            )
        else:
            total = await pool.fetchval(
                "SELECT COUNT(*) FROM entry_logs WHERE user_id = $1 AND space_id = $2",
                subject_id,
                space_id,
            )
        return int(total or 0)

    async def load_events(self, space_id: str) -> list[EntryEvent]:
        """Load all events for a space, oldest first (for startup replay)."""
        pool = get_db_pool()
        rows = await pool.fetch(
            f"""
            SELECT {_EVENT_COLUMNS} FROM entry_logs
            WHERE space_id = $1
            ORDER BY logged_at ASC
            """,
            space_id,
        )
        return [self._row_to_event(row) for row in rows]

    @staticmethod
    def _row_to_event(row) -> EntryEvent:
        """Convert a database row to an EntryEvent."""
        signals = SignalScores(
            gps=row["gps_confidence"],
            wifi=row["wifi_confidence"],
            motion=row["motion_confidence"],
            missing=tuple(row["missing_signals"] or ()),
            distance_meters=row["distance_meters"],
            zone=GpsZone(row["gps_zone"]),
        )
        return EntryEvent(
            event_id=row["event_id"],
            space_id=row["space_id"],
            subject_id=row["user_id"],
            kind=EntryKind(row["entry_type"]),
            confidence=row["confidence_score"],
            auto_logged=row["auto_logged"],
            manual_confirmed=row["manual_confirmed"],
            signals=signals,
            timestamp=row["logged_at"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            wifi_ssid=row["wifi_ssid"],
            speed_kmh=row["speed_kmh"],
        )


# Global repository instance
_entry_log_repo: Optional[EntryLogRepository] = None


def get_entry_log_repo() -> EntryLogRepository:
    """Get the global entry log repository."""
    global _entry_log_repo
    if _entry_log_repo is None:
        _entry_log_repo = EntryLogRepository()
    return _entry_log_repo
