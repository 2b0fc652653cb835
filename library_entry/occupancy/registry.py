"""
Registry of per-space occupancy trackers.
"""

import logging
from typing import Optional

from .tracker import OccupancyTracker

logger = logging.getLogger("library.entry.occupancy.registry")


class OccupancyRegistry:
    """Owns one tracker per space, created on first use."""

    def __init__(self):
        self._trackers: dict[str, OccupancyTracker] = {}

    def get(self, space_id: str) -> OccupancyTracker:
        """Get or create the tracker for a space."""
        if space_id not in self._trackers:
            self._trackers[space_id] = OccupancyTracker(space_id)
            logger.info("Tracking occupancy for space %s", space_id)
        return self._trackers[space_id]

    def find(self, space_id: str) -> Optional[OccupancyTracker]:
        """Get the tracker for a space if one exists."""
        return self._trackers.get(space_id)

    def spaces(self) -> list[str]:
        return list(self._trackers.keys())

    def total_occupancy(self) -> int:
        return sum(t.current_occupancy() for t in self._trackers.values())


# Singleton instance
_registry: Optional[OccupancyRegistry] = None


def get_occupancy_registry() -> OccupancyRegistry:
    """Get the singleton occupancy registry."""
    global _registry
    if _registry is None:
        _registry = OccupancyRegistry()
    return _registry


def set_occupancy_registry(registry: Optional[OccupancyRegistry]) -> None:
    """Replace the singleton occupancy registry."""
    global _registry
    _registry = registry
