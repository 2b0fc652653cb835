"""Tests for the entry log repository against a fake pool."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from library_entry.core.constants import EntryKind, GpsZone
from library_entry.core.models import EntryEvent, SignalScores
from library_entry.storage import EntryLogRepository


def _row(subject: str = "alice", kind: str = "entry", **overrides) -> dict:
    row = {
        "event_id": uuid4(),
        "space_id": "main-library",
        "user_id": subject,
        "entry_type": kind,
        "latitude": 37.7749,
        "longitude": -122.4194,
        "wifi_ssid": "LibraryWiFi",
        "speed_kmh": None,
        "distance_meters": 0.0,
        "gps_zone": "inside",
        "missing_signals": ["motion"],
        "confidence_score": 100,
        "gps_confidence": 100,
        "wifi_confidence": 100,
        "motion_confidence": 0,
        "auto_logged": True,
        "manual_confirmed": False,
        "logged_at": datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


class _FakePool:
    is_initialized = True

    def __init__(self, rows=None, count=0, status="INSERT 0 1"):
        self.rows = rows or []
        self.count = count
        self.status = status
        self.calls: list[tuple[str, tuple]] = []

    async def execute(self, query, *args):
        self.calls.append((query, args))
        return self.status

    async def fetch(self, query, *args):
        self.calls.append((query, args))
        return self.rows

    async def fetchval(self, query, *args):
        self.calls.append((query, args))
        return self.count


@pytest.fixture
def fake_pool(monkeypatch):
    pool = _FakePool()
    monkeypatch.setattr("library_entry.storage.repository.get_db_pool", lambda: pool)
    return pool


@pytest.mark.asyncio
async def test_insert_event_passes_audit_fields(fake_pool):
    event = EntryEvent(
        subject_id="alice",
        kind=EntryKind.EXIT,
        confidence=72,
        auto_logged=False,
        manual_confirmed=True,
        signals=SignalScores(gps=80, wifi=100, motion=0, missing=("motion",),
                             distance_meters=26.0, zone=GpsZone.TRANSITION),
        wifi_ssid="LibraryWiFi",
    )

    written = await EntryLogRepository().insert_event(event)

    assert written is True
    query, args = fake_pool.calls[0]
    assert "ON CONFLICT (event_id) DO NOTHING" in query
    assert args[0] == event.event_id
    assert args[2] == "alice"
    assert args[3] == "exit"
    assert args[9] == "transition"
    assert args[10] == ["motion"]
    assert args[11:15] == (72, 80, 100, 0)
    assert args[15] is False
    assert args[16] is True


@pytest.mark.asyncio
async def test_insert_duplicate_reports_no_write(fake_pool):
    fake_pool.status = "INSERT 0 0"
    event = EntryEvent(subject_id="alice", kind=EntryKind.ENTRY, confidence=90, auto_logged=True)
    assert await EntryLogRepository().insert_event(event) is False


@pytest.mark.asyncio
async def test_fetch_history_maps_rows(fake_pool):
    fake_pool.rows = [_row(kind="exit"), _row()]

    events = await EntryLogRepository().fetch_history("alice", limit=10, offset=0)

    assert [e.kind for e in events] == [EntryKind.EXIT, EntryKind.ENTRY]
    assert events[0].subject_id == "alice"
    assert events[0].signals.zone == GpsZone.INSIDE
    assert events[0].signals.missing == ("motion",)
    query, args = fake_pool.calls[0]
    assert "ORDER BY logged_at DESC" in query
    assert args == ("alice", 10, 0)


@pytest.mark.asyncio
async def test_fetch_history_filtered_by_space(fake_pool):
    await EntryLogRepository().fetch_history("alice", limit=5, offset=5, space_id="annex")
    _, args = fake_pool.calls[0]
    assert args == ("alice", "annex", 5, 5)


@pytest.mark.asyncio
async def test_count_history(fake_pool):
    fake_pool.count = 7
    assert await EntryLogRepository().count_history("alice") == 7


@pytest.mark.asyncio
async def test_load_events_oldest_first(fake_pool):
    fake_pool.rows = [_row()]
    events = await EntryLogRepository().load_events("main-library")
    assert len(events) == 1
    query, args = fake_pool.calls[0]
    assert "ORDER BY logged_at ASC" in query
    assert args == ("main-library",)


@pytest.mark.asyncio
async def test_pool_raises_when_not_initialized(db_reset):
    from library_entry.storage import get_db_pool

    with pytest.raises(RuntimeError):
        await get_db_pool().fetch("SELECT 1")
