"""Centralized logging configuration for the risk calculator."""

from __future__ import annotations

import io
import logging
import os
import sys
from pathlib import Path

LOGGER_NAME = "cvd_risk"

# Ensure UTF-8 capable streams on Windows consoles to avoid encoding errors.
# Skip this when running under pytest to avoid interfering with test capture.
if sys.platform == "win32" and "pytest" not in sys.modules and not os.environ.get("PYTEST_CURRENT_TEST"):
    try:
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")
    except (AttributeError, ValueError):
        # Already wrapped or in a non-standard environment
        pass


def _formatter(pattern: str, include_timestamp: bool) -> logging.Formatter:
    if include_timestamp:
        pattern = "%(asctime)s | " + pattern
    return logging.Formatter(pattern, datefmt="%Y-%m-%d %H:%M:%S" if include_timestamp else None)


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
    include_timestamp: bool = False,
) -> logging.Logger:
    """
    Configure the calculator's logger.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to also write logs to
        include_timestamp: Prefix records with timestamps. Off by default so
            CLI output stays diff-able between runs.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        handler.close()
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(_formatter("%(levelname)-8s | %(message)s", include_timestamp))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            _formatter("%(levelname)-8s | %(name)s | %(message)s", include_timestamp)
        )
        logger.addHandler(file_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the calculator's logger instance."""
    return logging.getLogger(LOGGER_NAME)
