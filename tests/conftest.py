"""Root test configuration."""

import logging

import pytest
import structlog
from systemd_exporter.clients.base import IntegerValue, PropertyValue, UnitManagerClient, UnitStatus
from systemd_exporter.core.errors import PropertyError


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class FakeUnitManager(UnitManagerClient):
    """In-memory unit manager recording every property query."""

    def __init__(self, units=None, properties=None):
        self.units = list(units or [])
        self.properties = dict(properties or {})
        self.list_error = None
        self.queries = []
        self.closed = 0

    def list_units(self):
        if self.list_error is not None:
            raise self.list_error
        return [UnitStatus(name=name) for name in self.units]

    def get_typed_property(self, unit_name, unit_type, property_name) -> PropertyValue:
        self.queries.append((unit_name, unit_type, property_name))
        value = self.properties.get((unit_name, property_name))
        if value is None:
            raise PropertyError(
                "Unknown property",
                unit=unit_name,
                property_name=property_name,
                details={"error": "org.freedesktop.DBus.Error.UnknownProperty"},
            )
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return IntegerValue(value)
        return value

    def close(self):
        self.closed += 1


@pytest.fixture
def fake_manager():
    return FakeUnitManager()
