"""Tests for rescat.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from rescat.logging import configure_logging, get_logger, log_scan_summary
from tests._fixtures.resource_tree import ResourceTreeBuilder


def test_get_logger_nests_under_rescat() -> None:
    assert get_logger("scanner").name == "rescat.scanner"
    assert get_logger().name == "rescat"


def test_console_prefix_names_level_only_for_problems(
    capsys: pytest.CaptureFixture[str],
) -> None:
    configure_logging()
    logger = get_logger("test")

    logger.info("indexed")
    logger.warning("skipped")
    logger.debug("hidden")

    err = capsys.readouterr().err
    assert "[rescat] indexed" in err
    assert "[rescat] WARNING: skipped" in err
    assert "hidden" not in err


def test_reconfiguring_replaces_handlers(tmp_path: Path) -> None:
    configure_logging()
    logger = configure_logging(verbose=True, log_file=tmp_path / "rescat.log")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    get_logger("test").debug("to file")
    for handler in logger.handlers:
        handler.flush()
    assert "DEBUG rescat.test: to file" in (tmp_path / "rescat.log").read_text(encoding="utf-8")


def test_scan_summary_reports_counts_and_problems(
    tree_builder: ResourceTreeBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    tree_builder.write_sample()
    tree_builder.write({"mcps/broken/bad.json": "{oops"})
    report = tree_builder.scan()
    caplog.clear()

    with caplog.at_level(logging.INFO, logger="rescat"):
        log_scan_summary(get_logger("test"), report)

    assert "Found 6 resources" in caplog.text
    assert "command: 2 in 2 categories" in caplog.text
    assert "1 path(s) skipped during the scan" in caplog.text
    assert "slug(s) shared" not in caplog.text
