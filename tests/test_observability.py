"""
Tests for logging setup.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from wingetdeck.core.observability.logging_config import resolve_level, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():  # type: ignore[no-untyped-def]
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_flags_win(self, monkeypatch):
        monkeypatch.setenv("DECK_LOG_LEVEL", "ERROR")
        assert resolve_level(debug=True) == "DEBUG"
        assert resolve_level(verbose=True) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_env_then_default(self, monkeypatch):
        monkeypatch.setenv("DECK_LOG_LEVEL", "INFO")
        assert resolve_level() == "INFO"
        monkeypatch.delenv("DECK_LOG_LEVEL")
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_console_level(self):
        setup_logging(level="INFO")
        assert logging.getLogger().level == logging.INFO

    def test_bad_level_falls_back_to_warning(self):
        setup_logging(level="LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_operation_log_file(self, tmp_path: Path):
        log_file = tmp_path / "deck.log"
        setup_logging(level="WARNING", log_file=str(log_file))

        logging.getLogger("wingetdeck.test").info("Install App (Vendor.App): succeeded")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text().strip()
        assert "[INFO] Install App (Vendor.App): succeeded" in line
        # Console stays quiet while the file records INFO
        assert logging.getLogger().level == logging.INFO

    def test_file_is_appended(self, tmp_path: Path):
        log_file = tmp_path / "deck.log"
        log_file.write_text("earlier line\n")
        setup_logging(log_file=str(log_file))
        logging.getLogger("wingetdeck.test").warning("later line")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert log_file.read_text().startswith("earlier line\n")

    def test_werkzeug_quieted(self):
        setup_logging(level="INFO")
        assert logging.getLogger("werkzeug").level == logging.WARNING
