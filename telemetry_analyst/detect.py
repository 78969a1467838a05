"""Per-metric z-score outlier detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from .domain import Anomaly, MetricDescriptor, ObservationSeries, Severity

logger = logging.getLogger(__name__)


# Detection thresholds (z-score, population std)
ANOMALY_Z_THRESHOLD = 3.0
HIGH_SEVERITY_Z_THRESHOLD = 5.0


@dataclass(frozen=True)
class MetricStats:
    metric_id: str
    count: int
    mean: float
    std: float  # population std (ddof=0)
    min: float
    max: float

    @property
    def effective_std(self) -> float:
        # a constant channel has std 0; every deviation is 0 as well, so z stays 0
        return self.std if self.std != 0 else 1.0

    def z_score(self, value):
        # works on a scalar or a whole ndarray of readings
        return abs(value - self.mean) / self.effective_std


def _collect(series: ObservationSeries, metric_id: str) -> tuple[np.ndarray, np.ndarray]:
    """Timestamps and values of every observation that carries metric_id."""
    pairs = [(obs.timestamp, obs.values[metric_id]) for obs in series if metric_id in obs.values]
    if not pairs:
        return np.empty(0), np.empty(0)
    t, v = zip(*pairs)
    return np.asarray(t, dtype=float), np.asarray(v, dtype=float)


def compute_metric_stats(series: ObservationSeries, metric_id: str) -> MetricStats | None:
    """
    Summary statistics for one metric over the defined readings.

    Returns:
        MetricStats, or None when the metric never appears in the series
    """
    _, values = _collect(series, metric_id)
    if len(values) == 0:
        return None
    return _stats_from_values(metric_id, values)


def _stats_from_values(metric_id: str, values: np.ndarray) -> MetricStats:
    return MetricStats(
        metric_id=metric_id,
        count=int(len(values)),
        mean=float(np.mean(values)),
        std=float(np.std(values)),
        min=float(np.min(values)),
        max=float(np.max(values)),
    )


def classify_severity(z: float) -> Severity:
    return Severity.HIGH if z > HIGH_SEVERITY_Z_THRESHOLD else Severity.MEDIUM


def detect_anomalies(series: ObservationSeries, registry: Iterable[MetricDescriptor]) -> list[Anomaly]:
    """
    Flag readings more than 3 standard deviations from their metric's mean.

    Each metric is handled independently. Output is grouped by metric in
    registry order, and in series order within a metric. It is NOT sorted
    by timestamp across metrics; sort explicitly if you need a timeline.

    Args:
        series: Observations to scan
        registry: Metrics to evaluate (metrics with no readings are skipped)

    Returns:
        List of Anomaly records (severity "medium" or "high")
    """
    anomalies: list[Anomaly] = []

    for metric in registry:
        timestamps, values = _collect(series, metric.id)
        if len(values) == 0:
            continue

        stats = _stats_from_values(metric.id, values)
        z = stats.z_score(values)
        flagged = np.flatnonzero(z > ANOMALY_Z_THRESHOLD)

        for i in flagged:
            zi = float(z[i])
            anomalies.append(
                Anomaly(
                    timestamp=float(timestamps[i]),
                    metric_id=metric.id,
                    value=float(values[i]),
                    z_score=zi,
                    severity=classify_severity(zi),
                )
            )

        if len(flagged):
            logger.debug("%s: %d anomalies (mean=%.3f, std=%.3f)", metric.id, len(flagged), stats.mean, stats.std)

    logger.info("Anomaly detection complete: %d anomalies across %d observations", len(anomalies), len(series))
    return anomalies


def anomalies_to_frame(anomalies: list[Anomaly]) -> pd.DataFrame:
    """Tabular view of anomalies (emission order preserved)."""
    columns = ["timestamp", "metric_id", "value", "z_score", "severity"]
    return pd.DataFrame(
        [(a.timestamp, a.metric_id, a.value, a.z_score, a.severity.value) for a in anomalies],
        columns=columns,
    )
