"""Core modules for the systemd exporter - error taxonomy and exit codes."""

from systemd_exporter.core.errors import (
    BusConnectionError,
    ConfigurationError,
    ExitCode,
    ExporterError,
    ListenerError,
    PropertyError,
    UnitManagerError,
    UnitQueryError,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "ExporterError",
    "ConfigurationError",
    "UnitManagerError",
    "BusConnectionError",
    "UnitQueryError",
    "PropertyError",
    "ListenerError",
    "main_with_error_handling",
]
