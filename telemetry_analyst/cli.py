"""
Command-line entry point.

How to run:
python -m telemetry_analyst --demo --seed 7
python -m telemetry_analyst --input data/flight.csv --range 100 400 --metrics altitude,velocity
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .analyze import AnalysisResult, analyze_csv, analyze_series
from .config import load_settings
from .detect import anomalies_to_frame
from .domain import DEFAULT_REGISTRY, MetricRegistry
from .ingest import series_to_frame
from .logging_config import setup_logging
from .summarize import summarize_range
from .synthetic import generate_profile

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="telemetry-analyst",
        description="Detect telemetry anomalies and print a text digest for analysis.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", type=str, help="Path to input CSV")
    source.add_argument("--demo", action="store_true", help="Use a synthetic flight profile")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for --demo")
    parser.add_argument("--metrics", type=str, default=None,
                        help="Comma-separated metric ids for the range summary (default: default metrics)")
    parser.add_argument("--range", type=int, nargs=2, metavar=("START", "END"), default=None,
                        help="Also summarize observations START..END (inclusive indices)")
    parser.add_argument("--export", type=str, default=None, help="Write the observation series to this CSV")
    parser.add_argument("--anomalies", type=str, default=None, help="Write detected anomalies to this CSV")
    parser.add_argument("--log-level", type=str, default=None, help="Override TELEMETRY_LOG_LEVEL")
    return parser


def _select_metrics(registry: MetricRegistry, spec: str | None):
    if not spec:
        return registry.defaults()
    selected = []
    for metric_id in (s.strip() for s in spec.split(",")):
        m = registry.get(metric_id)
        if m is None:
            logger.warning("Unknown metric %r ignored", metric_id)
            continue
        selected.append(m)
    return selected


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings()
    setup_logging(args.log_level or settings.log_level)

    registry = DEFAULT_REGISTRY

    if args.demo:
        result: AnalysisResult | None = analyze_series(generate_profile(seed=args.seed), registry)
    else:
        result, error = analyze_csv(Path(args.input), registry)
        if result is None:
            logger.error(error)
            return 1

    print(result.summary)

    if args.range is not None:
        start, end = args.range
        print()
        print(summarize_range(result.series, _select_metrics(registry, args.metrics), start, end))

    if args.export:
        series_to_frame(result.series).to_csv(args.export, index=False)
        logger.info("Series written to %s", args.export)
    if args.anomalies:
        anomalies_to_frame(result.anomalies).to_csv(args.anomalies, index=False)
        logger.info("Anomalies written to %s", args.anomalies)

    return 0


if __name__ == "__main__":
    sys.exit(main())
