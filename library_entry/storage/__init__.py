"""
Database storage for library_entry.

Provides PostgreSQL persistence for the entry log.
"""

from .config import db_settings
from .database import (
    DatabasePool,
    get_db_pool,
    init_database,
    close_database,
)
from .repository import EntryLogRepository, get_entry_log_repo

__all__ = [
    "db_settings",
    "DatabasePool",
    "get_db_pool",
    "init_database",
    "close_database",
    "EntryLogRepository",
    "get_entry_log_repo",
]
