"""
Prometheus exporter for systemd unit resource usage.

Publishes CPU time, IP traffic, memory and task counts of systemd units,
read live from the unit manager on every scrape.
"""

from systemd_exporter.collector import SystemdCollector
from systemd_exporter.metrics import DEFAULT_CATALOG, MetricCatalog, MetricDefinition, MetricKind

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CATALOG",
    "MetricCatalog",
    "MetricDefinition",
    "MetricKind",
    "SystemdCollector",
    "__version__",
]
