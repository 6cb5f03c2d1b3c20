"""
Metric catalog and data models.

Maps systemd unit properties to the Prometheus metrics the exporter publishes.
"""

from systemd_exporter.metrics.catalog import (
    DEFAULT_CATALOG,
    MetricCatalog,
    unit_record,
    unit_type_from_name,
)
from systemd_exporter.metrics.models import (
    UNIT_LABEL,
    MetricDefinition,
    MetricKind,
    Observation,
    UnitRecord,
)

__all__ = [
    "DEFAULT_CATALOG",
    "MetricCatalog",
    "MetricDefinition",
    "MetricKind",
    "Observation",
    "UNIT_LABEL",
    "UnitRecord",
    "unit_record",
    "unit_type_from_name",
]
