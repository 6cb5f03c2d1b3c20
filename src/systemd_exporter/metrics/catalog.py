"""
Static catalog mapping unit type and D-Bus property to exported metrics.

Unit type keys follow systemd's interface naming ("Service", "Socket"...),
which is what unit_type_from_name() derives from a unit name.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from systemd_exporter.metrics.models import MetricDefinition, MetricKind, UnitRecord

UNIT_TYPE_SEPARATOR = "."

_EMPTY: Mapping[str, MetricDefinition] = MappingProxyType({})


def unit_type_from_name(unit_name: str) -> str:
    """
    Derive the catalog key for a unit name.

    Takes the suffix after the last separator and upper-cases its first
    character only: "nginx.service" -> "Service". Names without a suffix
    yield an empty string.
    """
    _, sep, suffix = unit_name.rpartition(UNIT_TYPE_SEPARATOR)
    if not sep:
        return ""
    return suffix[:1].upper() + suffix[1:]


def unit_record(unit_name: str) -> UnitRecord:
    return UnitRecord(unit_name=unit_name, unit_type=unit_type_from_name(unit_name))


class MetricCatalog:
    """Read-only nested mapping: unit type -> property name -> definition."""

    def __init__(self, entries: Mapping[str, Mapping[str, MetricDefinition]]) -> None:
        seen: dict[str, tuple[str, str]] = {}
        frozen: dict[str, Mapping[str, MetricDefinition]] = {}
        for unit_type, properties in entries.items():
            for property_name, definition in properties.items():
                previous = seen.get(definition.exported_name)
                if previous is not None:
                    raise ValueError(
                        f"Duplicate exported name {definition.exported_name!r} "
                        f"for {unit_type}.{property_name} and {previous[0]}.{previous[1]}"
                    )
                seen[definition.exported_name] = (unit_type, property_name)
            frozen[unit_type] = MappingProxyType(dict(properties))
        self._entries: Mapping[str, Mapping[str, MetricDefinition]] = MappingProxyType(frozen)

    def lookup(self, unit_type: str, property_name: str) -> MetricDefinition | None:
        return self.properties_for(unit_type).get(property_name)

    def properties_for(self, unit_type: str) -> Mapping[str, MetricDefinition]:
        """Property map for a unit type; empty when the type is not tracked."""
        return self._entries.get(unit_type, _EMPTY)

    def unit_types(self) -> list[str]:
        return list(self._entries)

    def definitions(self) -> list[MetricDefinition]:
        """Every definition in the catalog, in declaration order."""
        return [
            definition
            for properties in self._entries.values()
            for definition in properties.values()
        ]

    def __contains__(self, unit_type: object) -> bool:
        return unit_type in self._entries

    def __len__(self) -> int:
        return sum(len(properties) for properties in self._entries.values())


def _counter(name: str, help_text: str) -> MetricDefinition:
    return MetricDefinition(exported_name=name, help_text=help_text, kind=MetricKind.COUNTER)


def _gauge(name: str, help_text: str) -> MetricDefinition:
    return MetricDefinition(exported_name=name, help_text=help_text, kind=MetricKind.GAUGE)


DEFAULT_CATALOG = MetricCatalog(
    {
        "Service": {
            "CPUUsageNSec": _counter(
                "systemd_service_cpu_usage_nanoseconds_total",
                "Total CPU time of a unit in nanoseconds",
            ),
            "IPIngressBytes": _counter(
                "systemd_service_ip_ingress_bytes_total",
                "Ingress bytes total",
            ),
            "IPIngressPackets": _counter(
                "systemd_service_ip_ingress_packets_total",
                "Ingress packets total",
            ),
            "IPEgressBytes": _counter(
                "systemd_service_ip_egress_bytes_total",
                "Egress bytes total",
            ),
            # Published spelling, scrapers depend on it
            "IPEgressPackets": _counter(
                "systemd_service_ip_eggress_packets_total",
                "Egress packets total",
            ),
            "MemoryCurrent": _gauge(
                "systemd_service_memory_current_bytes",
                "Amount of memory currently used by a unit in bytes",
            ),
            "TasksCurrent": _gauge(
                "systemd_service_tasks_current",
                "Amount of tasks. Includes both user processes and kernel threads.",
            ),
        },
    }
)
