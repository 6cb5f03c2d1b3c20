"""
Core data models for the metric catalog and collection engine.

Defines exported metric definitions, the per-scrape unit record, and the
observations the collector turns into Prometheus samples.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

UNIT_LABEL = "unit"


class MetricKind(Enum):
    """Prometheus value types supported by the exporter."""

    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDefinition:
    """
    Definition of one exported metric.

    Attributes:
        exported_name: Full Prometheus name, counters include the _total suffix
        help_text: HELP line shown in the exposition format
        kind: Counter or gauge
    """

    exported_name: str
    help_text: str
    kind: MetricKind


@dataclass(frozen=True)
class UnitRecord:
    """A unit seen during one scrape."""

    unit_name: str
    unit_type: str


@dataclass(frozen=True)
class Observation:
    """One sample produced by a scrape, labeled with the unit name."""

    definition: MetricDefinition
    value: float
    unit_name: str
