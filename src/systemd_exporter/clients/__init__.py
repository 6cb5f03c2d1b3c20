"""Unit manager clients."""

from systemd_exporter.clients.base import (
    IntegerValue,
    OtherValue,
    PropertyValue,
    UnitManagerClient,
    UnitStatus,
    property_value,
)
from systemd_exporter.clients.systemd import SystemdClient

__all__ = [
    "IntegerValue",
    "OtherValue",
    "PropertyValue",
    "SystemdClient",
    "UnitManagerClient",
    "UnitStatus",
    "property_value",
]
