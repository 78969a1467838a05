"""Plain-text digests of a telemetry series for the language-model analyst."""

from __future__ import annotations

from typing import Iterable

from .detect import compute_metric_stats
from .domain import Anomaly, MetricDescriptor, ObservationSeries


MAX_LISTED_ANOMALIES = 10
RANGE_SAMPLE_POINTS = 5
NO_DATA_IN_RANGE = "No data in the selected range."
MISSING_READING = "n/a"


def summarize_full(
    series: ObservationSeries,
    registry: Iterable[MetricDescriptor],
    anomalies: list[Anomaly],
) -> str:
    """
    Whole-flight digest: duration, metrics, anomaly count, per-metric extremes,
    and the first few anomalies in detection order.

    Safe on an empty series (duration is reported as unknown).
    """
    metrics = list(registry)
    lines: list[str] = []

    if series:
        lines.append(f"Flight duration: {series[-1].timestamp:.1f} s.")
    else:
        lines.append("Flight duration: unknown (no observations).")
    lines.append(f"Metrics analyzed: {', '.join(m.display_name for m in metrics)}.")
    lines.append(f"Total anomalies detected: {len(anomalies)}.")

    for m in metrics:
        stats = compute_metric_stats(series, m.id)
        if stats is None:
            continue
        lines.append(
            f"- {m.display_name}: max {stats.max:.2f}{m.unit}, min {stats.min:.2f}{m.unit}."
        )

    if anomalies:
        lines.append("\nNotable anomalies:")
        for a in anomalies[:MAX_LISTED_ANOMALIES]:
            lines.append(
                f"- T+{a.timestamp:.1f}s: {a.metric_id} value {a.value:.2f} (Z-Score: {a.z_score:.1f})"
            )

    return "\n".join(lines)


def summarize_range(
    series: ObservationSeries,
    metrics: Iterable[MetricDescriptor],
    start_index: int,
    end_index: int,
) -> str:
    """
    Digest of series[start_index..end_index] (inclusive) for selected metrics.

    Reports the window's start/end time, min/max/mean per metric and a coarse
    downsample for trend context. Missing readings count as 0 in min/max/mean.

    The downsample stride is max(1, n // 5), so it yields ceil(n / stride)
    points: usually 5, sometimes 6, and the final sample is not guaranteed.

    Args:
        series: Full observation series
        metrics: Metrics to report on
        start_index: First index (negative values clamp to 0)
        end_index: Last index, inclusive

    Returns:
        Summary text, or NO_DATA_IN_RANGE when the window is empty
    """
    metrics = list(metrics)
    start = max(0, start_index)
    if end_index < start:
        # negative end indices would otherwise wrap around to the tail
        return NO_DATA_IN_RANGE
    window = series[start:end_index + 1]
    if not window:
        return NO_DATA_IN_RANGE

    lines = [
        f"Time range: T+{window[0].timestamp:.1f}s to T+{window[-1].timestamp:.1f}s",
        f"Metrics analyzed: {', '.join(m.display_name for m in metrics)}",
    ]

    for m in metrics:
        vals = [obs.values.get(m.id, 0.0) for obs in window]
        avg = sum(vals) / len(vals)
        lines.append(
            f"- {m.display_name}: min {min(vals):.2f}, max {max(vals):.2f}, mean {avg:.2f} {m.unit}"
        )

    lines.append("\nSampled points (trend context):")
    stride = max(1, len(window) // RANGE_SAMPLE_POINTS)
    for obs in window[::stride]:
        readings = ", ".join(f"{m.display_name}: {_fmt(obs.value(m.id))}" for m in metrics)
        lines.append(f"@ T+{obs.timestamp:.1f}s: {readings}")

    return "\n".join(lines)


def _fmt(value: float | None) -> str:
    return MISSING_READING if value is None else f"{value:.2f}"
