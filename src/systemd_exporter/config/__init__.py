"""
Exporter configuration.

Pydantic-based settings read from the environment and an optional .env file.
"""

from systemd_exporter.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
