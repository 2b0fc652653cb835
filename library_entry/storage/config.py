"""
Entry log database settings.

Either a full DSN (LIBRARY_ENTRY_DB_DSN) or the individual host/port/
database/user/password parts may be given; the DSN wins when both are set.
"""

from typing import Any, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Where the entry log lives and how the pool is sized."""

    model_config = SettingsConfigDict(env_prefix="LIBRARY_ENTRY_DB_")

    enabled: bool = Field(default=True, description="Persist the entry log to Postgres")
    dsn: Optional[str] = Field(default=None, description="postgres:// URL, overrides the parts below")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="library", description="Database name")
    user: str = Field(default="library", description="Database user")
    password: Optional[str] = Field(default=None, description="Database password")

    bootstrap_schema: bool = Field(
        default=True,
        description="Create the entry_logs table and indexes at startup",
    )
    min_pool_size: int = Field(default=1, ge=0, description="Min pool connections")
    max_pool_size: int = Field(default=5, ge=1, description="Max pool connections")
    connect_timeout: float = Field(default=10.0, gt=0, description="Connection timeout")
    command_timeout: float = Field(default=15.0, gt=0, description="Per-query timeout")

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> "DatabaseSettings":
        if self.min_pool_size > self.max_pool_size:
            raise ValueError("min_pool_size cannot exceed max_pool_size")
        return self

    @property
    def target(self) -> str:
        """Connection target for log lines, without credentials."""
        if self.dsn:
            return self.dsn.rsplit("@", 1)[-1]
        return f"{self.host}:{self.port}/{self.database}"

    def pool_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for asyncpg.create_pool."""
        kwargs: dict[str, Any] = {
            "min_size": self.min_pool_size,
            "max_size": self.max_pool_size,
            "timeout": self.connect_timeout,
            "command_timeout": self.command_timeout,
        }
        if self.dsn:
            kwargs["dsn"] = self.dsn
        else:
            kwargs.update(
                host=self.host,
                port=self.port,
                database=self.database,
                user=self.user,
                password=self.password,
            )
        return kwargs


db_settings = DatabaseSettings()
