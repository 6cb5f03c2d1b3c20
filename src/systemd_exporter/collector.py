"""
Prometheus collector for systemd unit properties.

Each scrape lists the units known to systemd, looks up the catalog entries
for each unit's type and reads those properties one by one. Nothing is
cached between scrapes.

Value policy:
- property read fails: logged with unit and property, scrape continues
- value is not an unsigned 64-bit integer: skipped
- value is UINT64_MAX: skipped, systemd's "not tracked" marker
- unit listing fails: UnitQueryError, the whole scrape fails
"""

from __future__ import annotations

import threading
from collections.abc import Iterator

import structlog
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from systemd_exporter.clients.base import IntegerValue, UnitManagerClient
from systemd_exporter.core.errors import PropertyError
from systemd_exporter.metrics.catalog import DEFAULT_CATALOG, MetricCatalog, unit_record
from systemd_exporter.metrics.models import (
    UNIT_LABEL,
    MetricDefinition,
    MetricKind,
    Observation,
)

UINT64_MAX = 2**64 - 1


def metric_family(definition: MetricDefinition) -> Metric:
    """Build an empty metric family for a definition."""
    if definition.kind is MetricKind.COUNTER:
        return CounterMetricFamily(
            definition.exported_name, definition.help_text, labels=[UNIT_LABEL]
        )
    return GaugeMetricFamily(definition.exported_name, definition.help_text, labels=[UNIT_LABEL])


class SystemdCollector:
    """Custom collector implementing the prometheus_client describe/collect protocol."""

    def __init__(
        self,
        client: UnitManagerClient,
        catalog: MetricCatalog = DEFAULT_CATALOG,
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._catalog = catalog
        self._logger = logger if logger is not None else structlog.get_logger()
        self._lock = threading.Lock()

    def describe(self) -> Iterator[Metric]:
        for definition in self._catalog.definitions():
            yield metric_family(definition)

    def observe(self) -> Iterator[Observation]:
        """
        Stream observations for one scrape.

        Holds the client lock until the generator is exhausted or closed.

        Raises:
            UnitQueryError: If the unit listing fails
        """
        with self._lock:
            for status in self._client.list_units():
                record = unit_record(status.name)
                properties = self._catalog.properties_for(record.unit_type)
                for property_name, definition in properties.items():
                    try:
                        prop = self._client.get_typed_property(
                            record.unit_name, record.unit_type, property_name
                        )
                    except PropertyError as exc:
                        self._logger.warning(
                            "property_query_failed",
                            unit=record.unit_name,
                            property=property_name,
                            error=exc.details.get("error", exc.message),
                        )
                        continue

                    if not isinstance(prop, IntegerValue):
                        self._logger.debug(
                            "property_skipped",
                            unit=record.unit_name,
                            property=property_name,
                            reason="unsupported_type",
                            signature=prop.signature,
                        )
                        continue
                    if prop.value == UINT64_MAX:
                        self._logger.debug(
                            "property_skipped",
                            unit=record.unit_name,
                            property=property_name,
                            reason="not_tracked",
                        )
                        continue

                    yield Observation(
                        definition=definition,
                        value=float(prop.value),
                        unit_name=record.unit_name,
                    )

    def collect(self) -> Iterator[Metric]:
        families: dict[str, Metric] = {}
        for observation in self.observe():
            name = observation.definition.exported_name
            family = families.get(name)
            if family is None:
                family = families[name] = metric_family(observation.definition)
            family.add_metric([observation.unit_name], observation.value)
        yield from families.values()
