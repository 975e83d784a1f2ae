"""Tests for infrastructure/logging_config.py."""

from __future__ import annotations

import logging
import sys

import pytest

from infrastructure.logging_config import configure_logging


@pytest.fixture()
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_single_stderr_handler(self, restore_root: logging.Logger) -> None:
        configure_logging(logging.DEBUG)
        assert len(restore_root.handlers) == 1
        handler = restore_root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr
        assert restore_root.level == logging.DEBUG

    def test_format(self, restore_root: logging.Logger) -> None:
        configure_logging()
        record = logging.LogRecord("ableton_bridge.connection", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        line = restore_root.handlers[0].format(record)
        assert "[ableton_bridge.connection] INFO hello x" in line

    def test_quiets_websocket(self, restore_root: logging.Logger) -> None:
        configure_logging(logging.DEBUG)
        assert logging.getLogger("websocket").level == logging.CRITICAL
        assert logging.getLogger("uvicorn").level == logging.WARNING
