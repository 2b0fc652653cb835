"""
Database connection pool for library_entry.

Uses asyncpg for async PostgreSQL access. The entry log table is created
on first connect so a fresh database needs no separate migration step.
"""

import logging
from typing import Optional

import asyncpg

from .config import db_settings

logger = logging.getLogger("library.entry.storage.database")

ENTRY_LOG_SCHEMA = """
CREATE TABLE IF NOT EXISTS entry_logs (
    event_id          UUID PRIMARY KEY,
    space_id          TEXT NOT NULL,
    user_id           TEXT NOT NULL,
    entry_type        TEXT NOT NULL CHECK (entry_type IN ('entry', 'exit')),
    latitude          DOUBLE PRECISION,
    longitude         DOUBLE PRECISION,
    wifi_ssid         TEXT,
    speed_kmh         DOUBLE PRECISION,
    distance_meters   DOUBLE PRECISION,
    gps_zone          TEXT NOT NULL DEFAULT 'unknown',
    missing_signals   TEXT[] NOT NULL DEFAULT '{}',
    confidence_score  SMALLINT NOT NULL,
    gps_confidence    SMALLINT NOT NULL,
    wifi_confidence   SMALLINT NOT NULL,
    motion_confidence SMALLINT NOT NULL,
    auto_logged       BOOLEAN NOT NULL,
    manual_confirmed  BOOLEAN NOT NULL DEFAULT FALSE,
    logged_at         TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_entry_logs_user ON entry_logs (user_id, logged_at);
CREATE INDEX IF NOT EXISTS idx_entry_logs_space ON entry_logs (space_id, logged_at);
"""


class DatabasePool:
    """Manages the asyncpg connection pool for the entry log."""

    def __init__(self):
        self._pool: Optional[asyncpg.Pool] = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Check if the pool is initialized."""
        return self._initialized and self._pool is not None

    async def initialize(self) -> None:
        """Open the pool and make sure the entry log table exists."""
        if self._initialized:
            return

        if not db_settings.enabled:
            logger.info("Database disabled, entry log kept in memory only")
            return

        logger.info("Connecting to entry log database: %s", db_settings.target)

        self._pool = await asyncpg.create_pool(**db_settings.pool_kwargs())
        if db_settings.bootstrap_schema:
            await self._pool.execute(ENTRY_LOG_SCHEMA)
        self._initialized = True
        logger.info("Entry log database ready")

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            self._initialized = False
            logger.info("Database pool closed")

    def _require_pool(self) -> asyncpg.Pool:
        if not self._pool:
            raise RuntimeError("Database not initialized")
        return self._pool

    async def fetch(self, query: str, *args):
        """Execute query and fetch all rows."""
        return await self._require_pool().fetch(query, *args)

    async def fetchval(self, query: str, *args):
        """Execute query and fetch a single value."""
        return await self._require_pool().fetchval(query, *args)

    async def execute(self, query: str, *args):
        """Execute query without returning results."""
        return await self._require_pool().execute(query, *args)


# Global pool instance
_db_pool: Optional[DatabasePool] = None


def get_db_pool() -> DatabasePool:
    """Get the global database pool."""
    global _db_pool
    if _db_pool is None:
        _db_pool = DatabasePool()
    return _db_pool


async def init_database() -> None:
    """Initialize the database pool."""
    await get_db_pool().initialize()


async def close_database() -> None:
    """Close the database pool."""
    await get_db_pool().close()
