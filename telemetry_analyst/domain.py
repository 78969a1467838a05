from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping


# -----------------------------
# Metric catalog
# -----------------------------
@dataclass(frozen=True)
class MetricDescriptor:
    id: str     # stable key used in Observation.values (e.g. "altitude")
    display_name: str   # what humans (and the prompt) see, e.g. "Altitude"
    unit: str
    color: str = "#94a3b8"  # chart token, carried through untouched
    is_default: bool = False

    def __post_init__(self):
        if not self.id:
            raise ValueError("MetricDescriptor.id must be a non-empty string")


@dataclass(frozen=True)
class MetricRegistry:
    """
    Immutable, ordered catalog of metrics.

    Editing never happens in place: with_metric / without_metric return a
    new registry. Order matters because header binding and anomaly output
    both follow it.
    """
    metrics: tuple[MetricDescriptor, ...] = ()

    def __post_init__(self):
        # accept any iterable (list from a caller, generator, ...)
        object.__setattr__(self, "metrics", tuple(self.metrics))
        seen: set[str] = set()
        for m in self.metrics:
            if m.id in seen:
                raise ValueError(f"Duplicate metric id in registry: {m.id!r}")
            seen.add(m.id)

    def __iter__(self) -> Iterator[MetricDescriptor]:
        return iter(self.metrics)

    def __len__(self) -> int:
        return len(self.metrics)

    def __contains__(self, metric_id: object) -> bool:
        return any(m.id == metric_id for m in self.metrics)

    @property
    def ids(self) -> list[str]:
        return [m.id for m in self.metrics]

    def get(self, metric_id: str) -> MetricDescriptor | None:
        for m in self.metrics:
            if m.id == metric_id:
                return m
        return None

    def defaults(self) -> list[MetricDescriptor]:
        return [m for m in self.metrics if m.is_default]

    def with_metric(self, metric: MetricDescriptor) -> MetricRegistry:
        return MetricRegistry(self.metrics + (metric,))

    def without_metric(self, metric_id: str) -> MetricRegistry:
        return MetricRegistry(tuple(m for m in self.metrics if m.id != metric_id))


# Palette used for user-added metrics (cycled by registry size)
METRIC_PALETTE = (
    "#3b82f6", "#10b981", "#f59e0b", "#8b5cf6",
    "#ef4444", "#ec4899", "#14b8a6", "#eab308",
)

DEFAULT_METRICS: tuple[MetricDescriptor, ...] = (
    MetricDescriptor("altitude", "Altitude", "m", "#3b82f6", True),
    MetricDescriptor("velocity", "Velocity", "m/s", "#10b981", True),
    MetricDescriptor("acceleration", "Acceleration", "m/s²", "#f59e0b", True),
    MetricDescriptor("pressure", "Dynamic Pressure (Q)", "kPa", "#8b5cf6", False),
    MetricDescriptor("temp_engine", "Engine Temperature", "°C", "#ef4444", False),
    MetricDescriptor("vibration", "Vibration", "g", "#ec4899", False),
)

DEFAULT_REGISTRY = MetricRegistry(DEFAULT_METRICS)


def make_metric(name: str, unit: str, registry: MetricRegistry | None = None) -> MetricDescriptor:
    """Build a user-defined metric: "Cabin Pressure" -> id "cabin_pressure"."""
    name = name.strip()
    metric_id = re.sub(r"\s+", "_", name.lower())
    size = len(registry) if registry is not None else 0
    return MetricDescriptor(
        id=metric_id,
        display_name=name,
        unit=unit.strip(),
        color=METRIC_PALETTE[size % len(METRIC_PALETTE)],
        is_default=False,
    )


# -----------------------------
# Telemetry samples
# -----------------------------
@dataclass(frozen=True)
class Observation:
    timestamp: float    # seconds relative to mission epoch (T+0)
    values: Mapping[str, float] = field(default_factory=dict)  # metric id -> finite reading; missing key = no reading

    # the values mapping is unhashable, so observations are too (compare them, don't use them as keys)
    __hash__ = None

    def __post_init__(self):
        # freeze the mapping so a series really is read-only
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def value(self, metric_id: str) -> float | None:
        return self.values.get(metric_id)


# Ordered, index-addressable. Never re-sorted by timestamp.
ObservationSeries = tuple[Observation, ...]


# -----------------------------
# Detection output
# -----------------------------
class Severity(str, Enum):
    LOW = "low"     # part of the taxonomy, never emitted by detect_anomalies
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Anomaly:
    timestamp: float
    metric_id: str
    value: float
    z_score: float
    severity: Severity


# -----------------------------
# Analysis boundary
# -----------------------------
REPORT_STATUSES = ("success", "warning", "critical", "unknown")


@dataclass(frozen=True)
class AnalysisReport:
    status: str
    summary: str
    key_insights: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class ChatMessage:
    role: str   # "user" or "model"
    text: str


"""
How the pieces relate:

MetricRegistry  -> tells the ingestor which CSV columns matter
Observation     -> one row of telemetry, sparse (only the readings we got)
Anomaly         -> one reading that sits > 3 standard deviations from its metric's mean

Everything here is frozen. A pipeline run never edits its inputs, it only
builds new values from them.
"""
