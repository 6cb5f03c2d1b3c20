"""
Tests for the systemd D-Bus client.

The jeepney connection is mocked; replies are real jeepney messages so the
error/return unwrapping runs unmodified.
"""

from unittest.mock import Mock, patch

import pytest
from jeepney import new_error, new_method_return
from jeepney.low_level import HeaderFields
from systemd_exporter.clients.base import IntegerValue, OtherValue, property_value
from systemd_exporter.clients.systemd import (
    SystemdClient,
    escape_bus_label,
    unit_object_path,
)
from systemd_exporter.core.errors import BusConnectionError, PropertyError, UnitQueryError

UNIT_ROW = (
    "nginx.service",
    "A high performance web server",
    "loaded",
    "active",
    "running",
    "",
    "/org/freedesktop/systemd1/unit/nginx_2eservice",
    0,
    "",
    "/",
)


def _connection(reply_factory):
    """Mock connection answering each sent message with reply_factory(message)."""
    connection = Mock()
    connection.send_and_get_reply.side_effect = lambda msg, timeout=None: reply_factory(msg)
    return connection


def _sent(connection):
    return connection.send_and_get_reply.call_args.args[0]


@pytest.mark.parametrize(
    "label, expected",
    [
        ("nginx.service", "nginx_2eservice"),
        ("dbus-broker.service", "dbus_2dbroker_2eservice"),
        ("getty@tty1.service", "getty_40tty1_2eservice"),
        ("user_1000.slice", "user_5f1000_2eslice"),
        ("1password.service", "_31password_2eservice"),
        ("", "_"),
    ],
)
def test_escape_bus_label(label, expected):
    assert escape_bus_label(label) == expected


def test_escape_non_ascii():
    assert escape_bus_label("café") == "caf_c3_a9"


def test_unit_object_path():
    assert unit_object_path("nginx.service") == "/org/freedesktop/systemd1/unit/nginx_2eservice"


@pytest.mark.parametrize(
    "signature, value, expected",
    [
        ("t", 500000, IntegerValue(500000)),
        ("t", 2**64 - 1, IntegerValue(2**64 - 1)),
        ("x", -1, OtherValue("x", -1)),
        ("u", 7, OtherValue("u", 7)),
        ("s", "active", OtherValue("s", "active")),
        ("b", True, OtherValue("b", True)),
    ],
)
def test_property_value(signature, value, expected):
    assert property_value(signature, value) == expected


class TestListUnits:
    """Test ListUnits decoding."""

    def test_list_units(self):
        connection = _connection(lambda msg: new_method_return(msg, "a(ssssssouso)", ([UNIT_ROW],)))
        client = SystemdClient(connection)

        units = client.list_units()

        assert len(units) == 1
        assert units[0].name == "nginx.service"
        assert units[0].active_state == "active"
        assert units[0].path == "/org/freedesktop/systemd1/unit/nginx_2eservice"
        sent = _sent(connection)
        assert sent.header.fields[HeaderFields.member] == "ListUnits"
        assert sent.header.fields[HeaderFields.interface] == "org.freedesktop.systemd1.Manager"
        assert sent.header.fields[HeaderFields.destination] == "org.freedesktop.systemd1"

    def test_list_units_error_reply(self):
        connection = _connection(
            lambda msg: new_error(msg, "org.freedesktop.DBus.Error.AccessDenied", "s", ("denied",))
        )

        with pytest.raises(UnitQueryError):
            SystemdClient(connection).list_units()

    def test_list_units_timeout(self):
        connection = Mock()
        connection.send_and_get_reply.side_effect = TimeoutError("timed out")

        with pytest.raises(UnitQueryError) as exc_info:
            SystemdClient(connection, timeout=2.0).list_units()

        assert "timed out" in exc_info.value.details["error"]
        assert connection.send_and_get_reply.call_args.kwargs["timeout"] == 2.0


class TestGetTypedProperty:
    """Test Properties.Get requests and variant decoding."""

    def test_uint64_property(self):
        connection = _connection(lambda msg: new_method_return(msg, "v", (("t", 500000),)))

        value = SystemdClient(connection).get_typed_property("nginx.service", "Service", "CPUUsageNSec")

        assert value == IntegerValue(500000)
        sent = _sent(connection)
        assert sent.header.fields[HeaderFields.path] == "/org/freedesktop/systemd1/unit/nginx_2eservice"
        assert sent.header.fields[HeaderFields.interface] == "org.freedesktop.DBus.Properties"
        assert sent.header.fields[HeaderFields.member] == "Get"
        assert sent.body == ("org.freedesktop.systemd1.Service", "CPUUsageNSec")

    def test_other_property_type(self):
        connection = _connection(lambda msg: new_method_return(msg, "v", (("s", "running"),)))

        value = SystemdClient(connection).get_typed_property("nginx.service", "Service", "SubState")

        assert value == OtherValue("s", "running")

    def test_unknown_property(self):
        connection = _connection(
            lambda msg: new_error(
                msg, "org.freedesktop.DBus.Error.UnknownProperty", "s", ("Unknown property",)
            )
        )

        with pytest.raises(PropertyError) as exc_info:
            SystemdClient(connection).get_typed_property("nginx.service", "Service", "Bogus")

        assert exc_info.value.unit == "nginx.service"
        assert exc_info.value.property_name == "Bogus"
        assert exc_info.value.details["property"] == "Bogus"

    def test_closed_connection(self):
        client = SystemdClient(Mock())
        client.close()

        with pytest.raises(PropertyError):
            client.get_typed_property("nginx.service", "Service", "TasksCurrent")


class TestConnectionLifecycle:
    """Test opening and closing the bus connection."""

    @patch("systemd_exporter.clients.systemd.open_dbus_connection")
    def test_connect_system_bus(self, mock_open):
        client = SystemdClient.connect()

        mock_open.assert_called_once_with(bus="SYSTEM")
        assert isinstance(client, SystemdClient)

    @patch("systemd_exporter.clients.systemd.open_dbus_connection")
    def test_connect_session_bus(self, mock_open):
        SystemdClient.connect("session")

        mock_open.assert_called_once_with(bus="SESSION")

    @patch("systemd_exporter.clients.systemd.open_dbus_connection")
    def test_connect_failure(self, mock_open):
        mock_open.side_effect = FileNotFoundError("/run/dbus/system_bus_socket")

        with pytest.raises(BusConnectionError) as exc_info:
            SystemdClient.connect()

        assert "system_bus_socket" in exc_info.value.details["error"]

    def test_connect_unknown_bus(self):
        with pytest.raises(BusConnectionError):
            SystemdClient.connect("user")

    def test_close_once(self):
        connection = Mock()
        client = SystemdClient(connection)

        client.close()
        client.close()

        connection.close.assert_called_once_with()

    def test_context_manager_closes(self):
        connection = Mock()

        with SystemdClient(connection) as client:
            assert isinstance(client, SystemdClient)

        connection.close.assert_called_once_with()
