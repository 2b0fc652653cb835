"""
Configuration management for the library entry service.

Uses Pydantic Settings for environment variable support.
"""

import logging
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("library.entry.config")


class ServerConfig(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(env_prefix="LIBRARY_ENTRY_")

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5010, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")


class ScoringConfig(BaseSettings):
    """Entry confidence scoring configuration."""

    model_config = SettingsConfigDict(env_prefix="LIBRARY_ENTRY_SCORING_")

    reference_latitude: float = Field(default=37.7749, description="Library latitude")
    reference_longitude: float = Field(default=-122.4194, description="Library longitude")
    inside_radius_meters: float = Field(default=20.0, ge=0, description="Full GPS score radius")
    outside_radius_meters: float = Field(default=50.0, ge=0, description="Zero GPS score radius")
    expected_ssid: str = Field(default="LibraryWiFi", description="Library network SSID")
    stationary_speed_kmh: float = Field(default=5.0, ge=0, description="Walking speed ceiling")
    max_speed_kmh: float = Field(default=20.0, ge=0, description="Zero motion score speed")

    gps_weight: float = Field(default=40.0, ge=0, description="GPS signal weight")
    wifi_weight: float = Field(default=40.0, ge=0, description="WiFi signal weight")
    motion_weight: float = Field(default=20.0, ge=0, description="Motion signal weight")

    auto_threshold: int = Field(default=80, ge=0, le=100, description="Auto-log threshold")
    borderline_min: int = Field(default=50, ge=0, le=100, description="Manual confirm band floor")

    @model_validator(mode="after")
    def _check_bands(self) -> "ScoringConfig":
        if self.outside_radius_meters <= self.inside_radius_meters:
            raise ValueError("outside_radius_meters must exceed inside_radius_meters")
        if self.max_speed_kmh <= self.stationary_speed_kmh:
            raise ValueError("max_speed_kmh must exceed stationary_speed_kmh")
        if self.gps_weight + self.wifi_weight + self.motion_weight <= 0:
            raise ValueError("at least one signal weight must be positive")
        if self.borderline_min > self.auto_threshold:
            raise ValueError("borderline_min must not exceed auto_threshold")
        return self


class OccupancyConfig(BaseSettings):
    """Occupancy tracking and entry acceptance configuration."""

    model_config = SettingsConfigDict(env_prefix="LIBRARY_ENTRY_OCCUPANCY_")

    default_space_id: str = Field(default="main-library", description="Tracked space")
    debounce_minutes: float = Field(default=5.0, ge=0, description="Repeat window, 0 disables")
    exit_requires_leaving_zone: bool = Field(
        default=False,
        description="Reject exits still inside the outside radius",
    )
    privileged_roles: list[str] = Field(
        default=["librarian", "admin"],
        description="Roles allowed to see rosters and other users' history",
    )
    persist_retries: int = Field(default=3, ge=0, description="Persistence retry attempts")
    persist_backoff_seconds: float = Field(default=0.5, ge=0, description="Initial retry delay")
    history_page_size: int = Field(default=50, ge=1, description="Default history page size")


class LibraryHoursConfig(BaseSettings):
    """Library opening hours (warning only, never blocks an entry)."""

    model_config = SettingsConfigDict(env_prefix="LIBRARY_ENTRY_HOURS_")

    open_hour: int = Field(default=8, ge=0, le=23, description="Opening hour")
    close_hour: int = Field(default=22, ge=1, le=24, description="Closing hour")
    timezone: str = Field(default="UTC", description="IANA timezone for the hours")

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown IANA timezone: {value!r}") from None
        return value


class Settings(BaseSettings):
    """Main settings aggregator."""

    model_config = SettingsConfigDict(env_prefix="LIBRARY_ENTRY_")

    # Sub-configurations
    server: ServerConfig = Field(default_factory=ServerConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    occupancy: OccupancyConfig = Field(default_factory=OccupancyConfig)
    hours: LibraryHoursConfig = Field(default_factory=LibraryHoursConfig)

    # Logging
    log_level: str = Field(default="INFO", description="Log level")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
