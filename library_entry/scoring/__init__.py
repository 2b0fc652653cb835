"""
Entry confidence scoring.
"""

from .geo import haversine_meters, validate_coordinates
from .scorer import ConfidenceScorer

__all__ = [
    "ConfidenceScorer",
    "haversine_meters",
    "validate_coordinates",
]
