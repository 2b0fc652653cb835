"""
Coordinate helpers.
"""

import math
from typing import Optional

from ..core.models import EntryValidationError

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def validate_coordinates(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """
    Check a coordinate pair.

    Returns:
        True if a full pair is present, False if both are absent

    Raises:
        EntryValidationError: on a half pair or out-of-range values
    """
    if latitude is None and longitude is None:
        return False
    if latitude is None or longitude is None:
        raise EntryValidationError("latitude and longitude must be given together")
    if not -90.0 <= latitude <= 90.0:
        raise EntryValidationError("Valid latitude required")
    if not -180.0 <= longitude <= 180.0:
        raise EntryValidationError("Valid longitude required")
    return True
