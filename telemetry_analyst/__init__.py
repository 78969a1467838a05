"""
Telemetry Analyst - Rocket Flight Telemetry Digest

A toolkit for turning rocket-flight telemetry into anomaly lists and
compact text digests for a language-model analyst. Ingests CSV logs (or
generates a synthetic flight), flags per-metric z-score outliers, and
summarizes the whole flight or a selected index range.
"""

from .domain import (
    DEFAULT_METRICS,
    DEFAULT_REGISTRY,
    AnalysisReport,
    Anomaly,
    ChatMessage,
    MetricDescriptor,
    MetricRegistry,
    Observation,
    ObservationSeries,
    Severity,
    make_metric,
)
from .ingest import ingest, load_csv, series_to_frame
from .synthetic import generate_profile
from .detect import MetricStats, anomalies_to_frame, compute_metric_stats, detect_anomalies
from .summarize import NO_DATA_IN_RANGE, summarize_full, summarize_range
from .prompts import ReportParseError, build_range_prompt, build_report_prompt, fallback_report, parse_report
from .analyze import (
    AnalysisClient,
    AnalysisResult,
    analyze_csv,
    analyze_series,
    chat_with_flight_data,
    request_range_analysis,
    request_report,
)
from .config import ModelSettings, Settings, load_settings

__all__ = [
    # Domain models
    "MetricDescriptor",
    "MetricRegistry",
    "DEFAULT_METRICS",
    "DEFAULT_REGISTRY",
    "make_metric",
    "Observation",
    "ObservationSeries",
    "Anomaly",
    "Severity",
    "AnalysisReport",
    "ChatMessage",
    # Ingestion
    "ingest",
    "load_csv",
    "series_to_frame",
    # Synthetic data
    "generate_profile",
    # Detection
    "detect_anomalies",
    "compute_metric_stats",
    "MetricStats",
    "anomalies_to_frame",
    # Summaries
    "summarize_full",
    "summarize_range",
    "NO_DATA_IN_RANGE",
    # Analysis service boundary
    "build_report_prompt",
    "build_range_prompt",
    "parse_report",
    "fallback_report",
    "ReportParseError",
    "AnalysisClient",
    "AnalysisResult",
    "analyze_series",
    "analyze_csv",
    "request_report",
    "request_range_analysis",
    "chat_with_flight_data",
    # Configuration
    "ModelSettings",
    "Settings",
    "load_settings",
]

__version__ = "0.1.0"
