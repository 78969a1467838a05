"""Pipeline orchestration and the hand-off to the remote analysis service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from .config import ModelSettings
from .detect import detect_anomalies
from .domain import AnalysisReport, Anomaly, ChatMessage, MetricDescriptor, ObservationSeries
from .ingest import CSVSource, load_csv
from .prompts import (
    build_chat_instruction,
    build_range_prompt,
    build_report_prompt,
    fallback_report,
    format_chat_turn,
    parse_report,
)
from .summarize import summarize_full

logger = logging.getLogger(__name__)


RANGE_ANALYSIS_FAILED = "Range analysis failed."
RANGE_ANALYSIS_EMPTY = "Range analysis returned no result."
CHAT_EMPTY = "I could not generate an answer."


class AnalysisClient(Protocol):
    """Anything that can send a prompt to a language model and return its text."""

    def generate(
        self,
        prompt: str,
        settings: ModelSettings,
        *,
        json_response: bool = False,
        system_instruction: Optional[str] = None,
    ) -> str:
        ...


@dataclass(frozen=True)
class AnalysisResult:
    series: ObservationSeries
    anomalies: list[Anomaly]
    summary: str


def analyze_series(series: ObservationSeries, registry: Iterable[MetricDescriptor]) -> AnalysisResult:
    """
    Run detection + full summarization on an already-loaded series.

    Args:
        series: Observations from ingest() or generate_profile()
        registry: Metrics to analyze

    Returns:
        AnalysisResult with the series, anomalies and summary text
    """
    metrics = list(registry)
    anomalies = detect_anomalies(series, metrics)
    summary = summarize_full(series, metrics, anomalies)
    return AnalysisResult(series=series, anomalies=anomalies, summary=summary)


def analyze_csv(
    csv_source: CSVSource,
    registry: Iterable[MetricDescriptor],
) -> tuple[Optional[AnalysisResult], Optional[str]]:
    """
    Load a CSV and run the full pipeline.

    Returns:
        Tuple of (result, error):
        - On success: (AnalysisResult, None)
        - On failure: (None, error_message)
    """
    metrics = list(registry)
    try:
        series = load_csv(csv_source, metrics)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Could not read telemetry source: %s", e)
        return None, f"Could not read telemetry source: {e}"

    if len(series) == 0:
        return None, "No usable telemetry found (check the header row against the configured metrics)."

    return analyze_series(series, metrics), None


def request_report(summary: str, client: AnalysisClient, settings: ModelSettings) -> AnalysisReport:
    """Ask the service for a structured flight report; fallback report on any failure."""
    try:
        text = client.generate(build_report_prompt(summary), settings, json_response=True)
        return parse_report(text)
    except Exception as e:
        logger.exception("Flight analysis request failed")
        return fallback_report(e)


def request_range_analysis(range_summary: str, client: AnalysisClient, settings: ModelSettings) -> str:
    try:
        text = client.generate(build_range_prompt(range_summary), settings)
    except Exception:
        logger.exception("Range analysis request failed")
        return RANGE_ANALYSIS_FAILED
    return text or RANGE_ANALYSIS_EMPTY


def chat_with_flight_data(
    history: Iterable[ChatMessage],
    message: str,
    context: str,
    client: AnalysisClient,
    settings: ModelSettings,
) -> str:
    """One chat turn grounded in a flight summary. Client errors propagate to the caller."""
    text = client.generate(
        format_chat_turn(history, message),
        settings,
        system_instruction=build_chat_instruction(context),
    )
    return text or CHAT_EMPTY
