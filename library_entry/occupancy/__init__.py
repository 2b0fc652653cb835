"""
Occupancy tracking per physical space.
"""

from .registry import OccupancyRegistry, get_occupancy_registry, set_occupancy_registry
from .tracker import OccupancyTracker, SubjectState

__all__ = [
    "OccupancyTracker",
    "SubjectState",
    "OccupancyRegistry",
    "get_occupancy_registry",
    "set_occupancy_registry",
]
