from __future__ import annotations
import logging
import math
from pathlib import Path
from typing import IO, Iterable, Union

import pandas as pd

from .domain import MetricDescriptor, Observation, ObservationSeries

logger = logging.getLogger(__name__)

# Header cells containing any of these bind to the timestamp column
TIME_TOKENS = ("time", "sec")
TIMESTAMP_FIELD = "timestamp"

CSVSource = Union[str, Path, IO[bytes], IO[str]]


# -----------------------------
# Helpers
# -----------------------------

def _parse_number(raw: str) -> float | None:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    # NaN / inf never make it into an Observation
    return value if math.isfinite(value) else None


def _bind_headers(header_line: str, metrics: list[MetricDescriptor], delimiter: str) -> dict[int, str]:
    """
    Map column index -> field name ("timestamp" or a metric id).

    Time-like headers win. Otherwise the first metric whose id or display name
    appears inside the header cell takes the column. Unmatched columns are
    left out of the map, which drops them.
    """
    bindings: dict[int, str] = {}
    for idx, cell in enumerate(header_line.split(delimiter)):
        h = cell.strip().lower()
        if any(tok in h for tok in TIME_TOKENS):
            bindings[idx] = TIMESTAMP_FIELD
            continue
        for m in metrics:
            if m.id.lower() in h or m.display_name.lower() in h:
                bindings[idx] = m.id
                break
        else:
            logger.debug("Ignoring unmatched CSV column %r", cell.strip())
    return bindings


# -----------------------------
# Core ingestion
# -----------------------------
def ingest(raw_text: str, registry: Iterable[MetricDescriptor], delimiter: str = ",") -> ObservationSeries:
    """
    Parse delimited telemetry text into an ObservationSeries.

    Best effort: malformed rows, unparseable cells and unknown columns are
    dropped instead of raising. An empty result means nothing usable was
    found.

    Args:
        raw_text: Full CSV text, header row first
        registry: Metrics the header cells are matched against
        delimiter: Field separator (default ",")

    Returns:
        Tuple of Observations in source row order
    """
    metrics = list(registry)
    lines = raw_text.strip().split("\n")
    bindings = _bind_headers(lines[0], metrics, delimiter)
    header_width = len(lines[0].split(delimiter))
    min_fields = min(2, header_width)   # a single-column file has single-field rows

    observations: list[Observation] = []
    for row_idx in range(1, len(lines)):
        fields = lines[row_idx].split(delimiter)
        if len(fields) < min_fields:
            continue

        timestamp: float | None = None
        values: dict[str, float] = {}
        for col, name in bindings.items():
            if col >= len(fields):
                continue
            num = _parse_number(fields[col])
            if num is None:
                continue
            if name == TIMESTAMP_FIELD:
                timestamp = num
            else:
                values[name] = num

        if not values:
            continue
        if timestamp is None:
            # no usable time cell: assume 1 Hz, 1-based row index
            timestamp = float(row_idx)

        observations.append(Observation(timestamp=timestamp, values=values))

    logger.info("Ingested %d observations from %d data rows", len(observations), len(lines) - 1)
    return tuple(observations)


def load_csv(source: CSVSource, registry: Iterable[MetricDescriptor]) -> ObservationSeries:
    """Read a CSV path or file object and ingest it. I/O errors propagate."""
    if isinstance(source, (str, Path)):
        raw = Path(source).read_text(encoding="utf-8-sig")
    else:
        raw = source.read()
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8-sig")
    return ingest(raw, registry)


def series_to_frame(series: ObservationSeries) -> pd.DataFrame:
    """
    Flatten a series into a DataFrame for charting / export.

    One row per observation, "timestamp" first, absent readings as NaN.
    """
    rows = [{TIMESTAMP_FIELD: obs.timestamp, **obs.values} for obs in series]
    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=[TIMESTAMP_FIELD])
    cols = [TIMESTAMP_FIELD] + [c for c in df.columns if c != TIMESTAMP_FIELD]
    return df[cols]
