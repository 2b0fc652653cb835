"""
Pytest fixtures for library entry testing.

Provides fixtures for:
- Scoring configuration with known radii and thresholds
- Fresh occupancy registry and entry service per test
- Database pool reset (tests run without PostgreSQL)
"""

import os
from datetime import datetime, timedelta, timezone

import pytest

# Set test environment before importing library_entry modules
os.environ.setdefault("LIBRARY_ENTRY_DB_ENABLED", "false")


REFERENCE = (37.7749, -122.4194)


class FakeClock:
    """Controllable clock for the entry service."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def scoring_config():
    from library_entry.core.config import ScoringConfig

    return ScoringConfig(
        reference_latitude=REFERENCE[0],
        reference_longitude=REFERENCE[1],
        inside_radius_meters=50.0,
        outside_radius_meters=200.0,
        expected_ssid="LibraryWiFi",
        stationary_speed_kmh=5.0,
        max_speed_kmh=20.0,
    )


@pytest.fixture
def occupancy_config():
    from library_entry.core.config import OccupancyConfig

    return OccupancyConfig(
        default_space_id="main-library",
        debounce_minutes=5,
        persist_retries=2,
        persist_backoff_seconds=0,
    )


@pytest.fixture
def hours_config():
    from library_entry.core.config import LibraryHoursConfig

    return LibraryHoursConfig(open_hour=8, close_hour=22, timezone="UTC")


@pytest.fixture
def clock():
    # 10:00 UTC, inside library hours
    return FakeClock(datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def db_reset():
    """Ensure no database pool leaks between tests."""
    import library_entry.storage.database as db_module

    db_module._db_pool = None
    yield
    db_module._db_pool = None


@pytest.fixture
def entry_service(scoring_config, occupancy_config, hours_config, clock, db_reset):
    """Entry service with fresh state, installed as the singleton."""
    from library_entry.entry import EntryService, set_entry_service
    from library_entry.occupancy import OccupancyRegistry
    from library_entry.scoring import ConfidenceScorer

    service = EntryService(
        scorer=ConfidenceScorer(scoring_config),
        registry=OccupancyRegistry(),
        occupancy_config=occupancy_config,
        hours_config=hours_config,
        clock=clock,
    )
    set_entry_service(service)
    yield service
    set_entry_service(None)
