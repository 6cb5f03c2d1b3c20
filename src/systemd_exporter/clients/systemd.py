"""
systemd client over the D-Bus system bus.

Talks to org.freedesktop.systemd1 with a blocking jeepney connection. The
connection is not safe for concurrent use; callers serialize access.
"""

from __future__ import annotations

import string
from typing import Any

import structlog
from jeepney import DBusAddress, Properties, new_method_call
from jeepney.io.blocking import DBusConnection, open_dbus_connection
from jeepney.wrappers import DBusErrorResponse, unwrap_msg

from systemd_exporter.clients.base import (
    PropertyValue,
    UnitManagerClient,
    UnitStatus,
    property_value,
)
from systemd_exporter.core.errors import BusConnectionError, PropertyError, UnitQueryError

logger = structlog.get_logger()

SYSTEMD_BUS_NAME = "org.freedesktop.systemd1"
SYSTEMD_OBJECT_PATH = "/org/freedesktop/systemd1"
MANAGER_INTERFACE = "org.freedesktop.systemd1.Manager"
UNIT_INTERFACE_PREFIX = "org.freedesktop.systemd1."
UNIT_PATH_PREFIX = "/org/freedesktop/systemd1/unit/"

_BUS_NAMES = {"system": "SYSTEM", "session": "SESSION"}


def escape_bus_label(label: str) -> str:
    """
    Escape a string for use as one D-Bus object path element.

    ASCII letters and digits pass through, except a leading digit; every
    other byte becomes "_" plus two lower-case hex digits.
    """
    if not label:
        return "_"
    escaped = []
    for index, byte in enumerate(label.encode("utf-8")):
        char = chr(byte)
        if char in string.ascii_letters or (char in string.digits and index > 0):
            escaped.append(char)
        else:
            escaped.append(f"_{byte:02x}")
    return "".join(escaped)


def unit_object_path(unit_name: str) -> str:
    return UNIT_PATH_PREFIX + escape_bus_label(unit_name)


def _unit_status(row: tuple[Any, ...]) -> UnitStatus:
    # (name, description, load, active, sub, following, path, job id, job type, job path)
    return UnitStatus(
        name=row[0],
        description=row[1],
        load_state=row[2],
        active_state=row[3],
        sub_state=row[4],
        path=row[6],
    )


class SystemdClient(UnitManagerClient):
    """Unit manager client for systemd."""

    def __init__(self, connection: DBusConnection, *, timeout: float | None = None) -> None:
        self._connection: DBusConnection | None = connection
        self._timeout = timeout
        self._manager = DBusAddress(
            SYSTEMD_OBJECT_PATH, bus_name=SYSTEMD_BUS_NAME, interface=MANAGER_INTERFACE
        )

    @classmethod
    def connect(cls, bus: str = "system", *, timeout: float | None = None) -> SystemdClient:
        """Open a connection to the given bus ("system" or "session")."""
        try:
            bus_name = _BUS_NAMES[bus]
        except KeyError:
            raise BusConnectionError(f"Unknown bus: {bus}", {"bus": bus}) from None
        try:
            connection = open_dbus_connection(bus=bus_name)
        except (OSError, ValueError, KeyError) as exc:
            raise BusConnectionError(
                "Failed to connect to D-Bus", {"bus": bus, "error": str(exc)}
            ) from exc
        logger.debug("dbus_connected", bus=bus)
        return cls(connection, timeout=timeout)

    def _call(self, message: Any) -> tuple[Any, ...]:
        if self._connection is None:
            raise OSError("connection is closed")
        reply = self._connection.send_and_get_reply(message, timeout=self._timeout)
        return unwrap_msg(reply)

    def list_units(self) -> list[UnitStatus]:
        try:
            body = self._call(new_method_call(self._manager, "ListUnits"))
        except (DBusErrorResponse, OSError) as exc:
            # TimeoutError is an OSError
            raise UnitQueryError("Failed to list units", {"error": str(exc)}) from exc
        return [_unit_status(row) for row in body[0]]

    def get_typed_property(
        self, unit_name: str, unit_type: str, property_name: str
    ) -> PropertyValue:
        address = DBusAddress(
            unit_object_path(unit_name),
            bus_name=SYSTEMD_BUS_NAME,
            interface=UNIT_INTERFACE_PREFIX + unit_type,
        )
        try:
            body = self._call(Properties(address).get(property_name))
        except (DBusErrorResponse, OSError) as exc:
            raise PropertyError(
                f"Failed to read {property_name}",
                unit=unit_name,
                property_name=property_name,
                details={"error": str(exc)},
            ) from exc
        signature, value = body[0]
        return property_value(signature, value)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("dbus_closed")
