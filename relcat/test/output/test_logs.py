"""Tests for relcat.output.logs module."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from rich.logging import RichHandler

from relcat.output.logs import setup_logging


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    logger = logging.getLogger("relcat")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestSetupLogging:
    def test_default_level(self) -> None:
        logger = setup_logging()
        assert logger.name == "relcat"
        assert logger.level == logging.WARNING
        assert not logger.propagate

    def test_verbose(self) -> None:
        assert setup_logging(verbose=True).level == logging.DEBUG

    def test_explicit_level_wins(self) -> None:
        assert setup_logging(verbose=True, log_level="info").level == logging.INFO

    def test_handlers_are_not_stacked(self) -> None:
        setup_logging()
        logger = setup_logging(verbose=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_module_loggers_inherit(self) -> None:
        setup_logging(verbose=True)
        assert logging.getLogger("relcat.catalog.graph").getEffectiveLevel() == logging.DEBUG
