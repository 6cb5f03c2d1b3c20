"""
Unified error handling for the systemd exporter.

This module provides the exception taxonomy, exit codes, and the error
handling decorator used by the command line entry point.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Unit manager (D-Bus) error
- 12: HTTP listener error
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
from enum import IntEnum
from typing import Any, Callable

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for the exporter process."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    BUS_ERROR = 11
    LISTENER_ERROR = 12
    UNKNOWN_ERROR = 127


class ExporterError(Exception):
    """Base exception for exporter errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ExporterError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class UnitManagerError(ExporterError):
    """Raised when the unit manager bus fails."""

    exit_code = ExitCode.BUS_ERROR


class BusConnectionError(UnitManagerError):
    """Raised when the bus connection cannot be opened."""


class UnitQueryError(UnitManagerError):
    """Raised when listing units fails."""


class PropertyError(UnitManagerError):
    """Raised when a single unit property cannot be read."""

    def __init__(self, message: str, *, unit: str, property_name: str, details: dict[str, Any] | None = None):
        super().__init__(message, {"unit": unit, "property": property_name, **(details or {})})
        self.unit = unit
        self.property_name = property_name


class ListenerError(ExporterError):
    """Raised when the HTTP listener cannot be bound."""

    exit_code = ExitCode.LISTENER_ERROR


# SIGINT convention
INTERRUPTED_EXIT_CODE = 130


def main_with_error_handling(func: Callable[..., int]) -> Callable[..., int]:
    """
    Turn exceptions escaping the entry point into exit codes.

    ExporterError subclasses map to their exit_code, KeyboardInterrupt to 130
    and anything else to ExitCode.UNKNOWN_ERROR. Every failure is logged.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> int:
        try:
            return func(*args, **kwargs)
        except ExporterError as exc:
            logger.error(
                "startup_failed",
                error_type=type(exc).__name__,
                message=exc.message,
                exit_code=int(exc.exit_code),
                **exc.details,
            )
            return exc.exit_code
        except KeyboardInterrupt:
            logger.info("interrupted")
            return INTERRUPTED_EXIT_CODE
        except Exception as exc:
            logger.exception("unexpected_error", error_type=type(exc).__name__)
            return ExitCode.UNKNOWN_ERROR

    return wrapper
