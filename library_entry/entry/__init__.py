"""
Entry/exit submission handling.
"""

from .service import EntryService, get_entry_service, set_entry_service

__all__ = [
    "EntryService",
    "get_entry_service",
    "set_entry_service",
]
