"""Central logging setup. Library modules only call logging.getLogger(__name__)."""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "telemetry_analyst"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Attach a single console handler to the package logger.

    Safe to call more than once: later calls only change the level.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not any(getattr(h, "_telemetry_console", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._telemetry_console = True
        logger.addHandler(handler)

    return logger
