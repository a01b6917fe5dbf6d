"""Tests for compgen.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from compgen.logging import configure_logging, get_logger, parse_level


@pytest.fixture
def restore_compgen_logger():
    logger = logging.getLogger("compgen")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.level, logger.propagate = saved[0], saved[1]
    for handler in saved[2]:
        logger.addHandler(handler)


@pytest.mark.parametrize(
    "level, expected",
    [
        ("error", logging.ERROR),
        ("warn", logging.WARNING),
        ("INFO", logging.INFO),
        ("verbose", logging.DEBUG),
        ("debug", logging.DEBUG),
        (None, logging.INFO),
        ("silly", logging.INFO),
    ],
)
def test_parse_level(level, expected: int) -> None:
    assert parse_level(level) == expected


def test_get_logger_namespaces_under_compgen() -> None:
    assert get_logger("external").name == "compgen.external"
    assert get_logger().name == "compgen"


def test_configure_logging_replaces_handlers(tmp_path: Path, restore_compgen_logger) -> None:
    configure_logging(level="warn")
    logger = configure_logging(level="debug", log_file=tmp_path / "compgen.log")

    assert logger is restore_compgen_logger
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert len(logger.handlers) == 2

    get_logger("generator").debug("hello from a child logger")
    for handler in logger.handlers:
        handler.flush()
    assert "hello from a child logger" in (tmp_path / "compgen.log").read_text(encoding="utf-8")
