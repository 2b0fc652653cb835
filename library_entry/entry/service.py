"""
Entry Service - accept or reject patron entry/exit submissions.

Flow for one submission:
    validate ──► hours warning ──► distance ──► score
        │
        ▼
    [space lock] debounce ──► exit-zone check ──► decision ──► roster update
        │
        ▼
    background persist (retried, idempotent on event_id)

Rejections are ordinary results, not exceptions. Only malformed input
raises (EntryValidationError).
"""

import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from ..core.config import LibraryHoursConfig, OccupancyConfig, ScoringConfig, settings
from ..core.constants import ACCEPT_MESSAGES, REJECTION_MESSAGES, Decision, EntryKind
from ..core.models import (
    ConfidenceResult,
    EntryEvent,
    EntryRequest,
    EntrySubmission,
    EntryValidationError,
    utcnow,
)
from ..occupancy import OccupancyRegistry, OccupancyTracker, get_occupancy_registry
from ..scoring import ConfidenceScorer, haversine_meters, validate_coordinates
from ..storage import EntryLogRepository, get_db_pool, get_entry_log_repo

logger = logging.getLogger("library.entry.service")


class EntryService:
    """
    Orchestrates scoring, occupancy updates and persistence.

    Dependencies default to the process-wide settings and singletons but
    can all be injected.
    """

    def __init__(
        self,
        scorer: Optional[ConfidenceScorer] = None,
        registry: Optional[OccupancyRegistry] = None,
        occupancy_config: Optional[OccupancyConfig] = None,
        hours_config: Optional[LibraryHoursConfig] = None,
        repository: Optional[EntryLogRepository] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.scorer = scorer or ConfidenceScorer()
        self.registry = registry or get_occupancy_registry()
        self.occupancy_config = occupancy_config or settings.occupancy
        self.hours_config = hours_config or settings.hours
        self.repository = repository or get_entry_log_repo()
        self._clock = clock
        self._pending: set[asyncio.Task] = set()
        self._unpersisted: dict[UUID, EntryEvent] = {}

    @property
    def scoring_config(self) -> ScoringConfig:
        return self.scorer.config

    def tracker(self, space_id: Optional[str] = None) -> OccupancyTracker:
        """Get the tracker for a space (default space if None)."""
        return self.registry.get(space_id or self.occupancy_config.default_space_id)

    def find_tracker(self, space_id: Optional[str] = None) -> Optional[OccupancyTracker]:
        """Look up a space's tracker without creating one."""
        return self.registry.find(space_id or self.occupancy_config.default_space_id)

    # === Submission ===

    async def submit(self, request: EntryRequest) -> EntrySubmission:
        """
        Score a submission and log it if accepted.

        Raises:
            EntryValidationError: if the request is malformed
        """
        kind = self._validate(request)
        now = self._clock()

        warnings = []
        if not self.is_within_library_hours(now):
            warnings.append("Entry logged outside library hours")

        distance = None
        if request.latitude is not None:
            distance = haversine_meters(
                request.latitude,
                request.longitude,
                self.scoring_config.reference_latitude,
                self.scoring_config.reference_longitude,
            )

        confidence = self.scorer.score(
            gps_distance_meters=distance,
            observed_ssid=request.wifi_ssid,
            speed_kmh=request.speed_kmh,
            manual_confirm=request.manual_confirm,
        )

        tracker = self.tracker(request.space_id)
        async with tracker.lock:
            rejection = self._check_recent(tracker, request, kind, now)
            if rejection is None:
                rejection = self._check_exit_zone(tracker, request, kind, confidence)
            if rejection is None and not confidence.accepted:
                rejection = EntrySubmission(
                    decision=confidence.decision,
                    confidence=confidence,
                    message=REJECTION_MESSAGES[confidence.decision],
                )

            if rejection is not None:
                rejection.confidence = rejection.confidence or confidence
                rejection.warnings = warnings
                logger.info(
                    "Rejected %s for %s: %s (confidence %d)",
                    kind.value,
                    request.subject_id,
                    rejection.decision.value,
                    confidence.total,
                )
                return rejection

            event = EntryEvent(
                subject_id=request.subject_id,
                space_id=tracker.space_id,
                kind=kind,
                confidence=confidence.total,
                auto_logged=confidence.auto_logged,
                manual_confirmed=request.manual_confirm,
                signals=confidence.signals,
                timestamp=now,
                latitude=request.latitude,
                longitude=request.longitude,
                wifi_ssid=request.wifi_ssid,
                speed_kmh=request.speed_kmh,
            )
            tracker.record(event)

        logger.info(
            "Logged %s for %s in %s (confidence %d, %s)",
            kind.value,
            request.subject_id,
            tracker.space_id,
            confidence.total,
            confidence.decision.value,
        )
        self._schedule_persist(event)

        return EntrySubmission(
            decision=confidence.decision,
            confidence=confidence,
            event=event,
            warnings=warnings,
            message=ACCEPT_MESSAGES[confidence.decision],
        )

    def _validate(self, request: EntryRequest) -> EntryKind:
        """Validate a request before any scoring."""
        if not request.subject_id:
            raise EntryValidationError("subject id is required")
        if not request.entry_type:
            raise EntryValidationError("entryType is required")
        try:
            kind = EntryKind(request.entry_type)
        except ValueError:
            raise EntryValidationError(
                f"entryType must be 'entry' or 'exit', got {request.entry_type!r}"
            ) from None

        validate_coordinates(request.latitude, request.longitude)
        if request.speed_kmh is not None and not math.isfinite(request.speed_kmh):
            raise EntryValidationError("speedKmh must be a finite number")
        if request.speed_kmh is not None and request.speed_kmh < 0:
            raise EntryValidationError("speedKmh must be non-negative")
        return kind

    def _check_recent(
        self,
        tracker: OccupancyTracker,
        request: EntryRequest,
        kind: EntryKind,
        now: datetime,
    ) -> Optional[EntrySubmission]:
        """Reject a same-kind repeat inside the debounce window."""
        window = self.occupancy_config.debounce_minutes
        if window <= 0 or request.manual_confirm:
            return None

        last = tracker.last_event_for(request.subject_id)
        if last is None or last.kind != kind:
            return None

        elapsed = now - last.timestamp
        if elapsed >= timedelta(minutes=window):
            return None

        minutes_since = int(elapsed.total_seconds() // 60)
        return EntrySubmission(
            decision=Decision.RECENT_ENTRY,
            message=REJECTION_MESSAGES[Decision.RECENT_ENTRY],
            details={
                "lastEntry": last.to_dict(),
                "debounceInfo": {
                    "minutesSince": minutes_since,
                    "debounceWindow": window,
                },
            },
        )

    def _check_exit_zone(
        self,
        tracker: OccupancyTracker,
        request: EntryRequest,
        kind: EntryKind,
        confidence: ConfidenceResult,
    ) -> Optional[EntrySubmission]:
        """Reject an exit reported from still inside the geofence."""
        if not self.occupancy_config.exit_requires_leaving_zone:
            return None
        if kind != EntryKind.EXIT or request.manual_confirm:
            return None
        if not tracker.is_inside(request.subject_id):
            return None

        distance = confidence.signals.distance_meters
        required = self.scoring_config.outside_radius_meters
        if distance is None or distance > required:
            return None

        return EntrySubmission(
            decision=Decision.STILL_IN_ZONE,
            message=REJECTION_MESSAGES[Decision.STILL_IN_ZONE],
            details={
                "exitValidation": {
                    "distanceMeters": round(distance),
                    "requiredDistance": required,
                },
            },
        )

    def is_within_library_hours(self, when: Optional[datetime] = None) -> bool:
        """Check a time against the configured opening hours."""
        when = when or self._clock()
        local = when.astimezone(ZoneInfo(self.hours_config.timezone))
        return self.hours_config.open_hour <= local.hour < self.hours_config.close_hour

    # === History ===

    async def history(
        self,
        subject_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[EntryEvent], int]:
        """
        Get a subject's events, newest first, with the total count.

        Reads from the database when it is available, else from memory.
        Accepted events whose write has not landed yet are merged into the
        database page.
        """
        limit = limit or self.occupancy_config.history_page_size
        if get_db_pool().is_initialized:
            unwritten = [e for e in self._unpersisted.values() if e.subject_id == subject_id]
            if not unwritten:
                events = await self.repository.fetch_history(subject_id, limit=limit, offset=offset)
                total = await self.repository.count_history(subject_id)
                return events, total

            stored = await self.repository.fetch_history(subject_id, limit=offset + limit, offset=0)
            total = await self.repository.count_history(subject_id)
            stored_ids = {e.event_id for e in stored}
            extra = [e for e in unwritten if e.event_id not in stored_ids]
            merged = sorted(stored + extra, key=lambda e: e.timestamp, reverse=True)
            return merged[offset:offset + limit], total + len(extra)

        events = []
        for space_id in self.registry.spaces():
            events.extend(self.registry.get(space_id).history_for(subject_id))
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[offset:offset + limit], len(events)

    # === Persistence ===

    def _schedule_persist(self, event: EntryEvent) -> None:
        """Persist an accepted event in the background."""
        if not get_db_pool().is_initialized:
            logger.debug("Database not initialized, event %s kept in memory", event.event_id)
            return
        self._unpersisted[event.event_id] = event
        task = asyncio.create_task(self.persist(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def persist(self, event: EntryEvent) -> bool:
        """Write an event, retrying with exponential backoff."""
        retries = self.occupancy_config.persist_retries
        delay = self.occupancy_config.persist_backoff_seconds

        for attempt in range(retries + 1):
            try:
                await self.repository.insert_event(event)
                self._unpersisted.pop(event.event_id, None)
                return True
            except Exception as e:
                if attempt >= retries:
                    logger.error(
                        "Failed to persist event %s after %d attempts: %s",
                        event.event_id,
                        attempt + 1,
                        e,
                    )
                    return False
                wait = delay * (2 ** attempt)
                logger.warning(
                    "Persisting event %s failed (attempt %d), retrying in %.1fs: %s",
                    event.event_id,
                    attempt + 1,
                    wait,
                    e,
                )
                await asyncio.sleep(wait)
        return False

    async def drain(self) -> None:
        """Wait for in-flight persistence tasks."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def restore(self, events: Iterable[EntryEvent]) -> int:
        """
        Replay persisted events into the occupancy registry.

        Returns:
            Number of events applied
        """
        count = 0
        for event in events:
            await self.registry.get(event.space_id).apply(event)
            count += 1
        logger.info("Restored %d entry events", count)
        return count

    async def restore_from_database(self) -> int:
        """Rebuild the default space's roster from the entry log."""
        if not get_db_pool().is_initialized:
            return 0
        events = await self.repository.load_events(self.occupancy_config.default_space_id)
        return await self.restore(events)


# Singleton instance
_entry_service: Optional[EntryService] = None


def get_entry_service() -> EntryService:
    """Get the singleton entry service instance."""
    global _entry_service
    if _entry_service is None:
        _entry_service = EntryService()
    return _entry_service


def set_entry_service(service: Optional[EntryService]) -> None:
    """Set the singleton entry service instance."""
    global _entry_service
    _entry_service = service
