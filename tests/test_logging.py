"""Tests for stager.logging."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from stager.logging import configure_logging, get_logger


def test_get_logger_nests_under_stager() -> None:
    assert get_logger().name == "stager"
    assert get_logger("content").name == "stager.content"


def test_console_lines_carry_stage_name() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("cache").info("Restoring build cache")
    get_logger().warning("top level")
    get_logger("cache").debug("hidden unless verbose")

    lines = stream.getvalue().splitlines()
    assert lines == [
        "[stager:cache] INFO Restoring build cache",
        "[stager:main] WARNING top level",
    ]


def test_configure_logging_replaces_handlers(tmp_path: Path) -> None:
    configure_logging(stream=io.StringIO())
    logger = configure_logging(verbose=True, log_file=tmp_path / "stager.log", stream=io.StringIO())

    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert len(logger.handlers) == 2

    get_logger("test").debug("hello from test")
    for handler in logger.handlers:
        handler.flush()
    assert "hello from test" in (tmp_path / "stager.log").read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
