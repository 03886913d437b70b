"""Logging setup for the rescat CLI and service, plus scan summaries."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING

from .models import ResourceType

if TYPE_CHECKING:
    from .scanner import ScanReport

_LOGGER_NAME = "rescat"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ConsoleFormatter(logging.Formatter):
    """Prefix console lines with ``[rescat]``; name the level only above INFO."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno > logging.INFO:
            return f"[rescat] {record.levelname}: {message}"
        return f"[rescat] {message}"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``rescat.<name>``, or the root ``rescat`` logger."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach a console handler (and optionally a file sink) to the rescat logger.

    Calling this again replaces the handlers from the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(_ConsoleFormatter("%(message)s"))
    handlers: list[logging.Handler] = [console]
    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        handlers.append(sink)
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


def log_scan_summary(logger: logging.Logger, report: "ScanReport") -> None:
    """Log per-type resource counts and the number of problems found by a scan."""
    counts = Counter(resource.type for resource in report.index.resources)
    logger.info("Found %d resources", report.index.total_count)
    for resource_type in ResourceType:
        logger.info(
            "  - %s: %d in %d categories",
            resource_type.value,
            counts.get(resource_type, 0),
            len(report.index.categories.get(resource_type, [])),
        )
    if report.failures:
        logger.warning("%d path(s) skipped during the scan", len(report.failures))
    if report.collisions:
        logger.warning("%d slug(s) shared by more than one file", len(report.collisions))


__all__ = ["configure_logging", "get_logger", "log_scan_summary"]
