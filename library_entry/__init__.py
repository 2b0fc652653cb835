"""
Library Entry - patron entry/exit confidence scoring and occupancy tracking.
"""

__version__ = "0.1.0"
