"""
Exporter settings using Pydantic.

Provides environment-based configuration loading with SYSTEMD_EXPORTER_ prefix.
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Exporter settings."""

    # HTTP
    listen_address: str = ":8080"
    metrics_path: str = "/metrics"

    # D-Bus
    bus: Literal["system", "session"] = "system"
    bus_timeout: float | None = None  # seconds per call, None waits forever

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("metrics_path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("metrics_path must start with '/'")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SYSTEMD_EXPORTER_",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
