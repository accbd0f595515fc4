"""Tests for ampbox.logging module."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from ampbox.logging import (
    _get_log_level,
    _init_logging,
    add_phase_log_file,
    get_logger,
    remove_log_handler,
    set_debug,
)


class TestGetLogLevel:
    """Tests for _get_log_level function."""

    def test_default_is_warning(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert _get_log_level() == logging.WARNING

    @pytest.mark.parametrize("value", ["1", "true", "yes", "TRUE"])
    def test_debug_enabled(self, value: str) -> None:
        with patch.dict(os.environ, {"AMPBOX_DEBUG": value}):
            assert _get_log_level() == logging.DEBUG

    def test_invalid_value_is_warning(self) -> None:
        with patch.dict(os.environ, {"AMPBOX_DEBUG": "invalid"}):
            assert _get_log_level() == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_logger(self) -> None:
        assert isinstance(get_logger("test_module"), logging.Logger)

    def test_prefixes_with_ampbox(self) -> None:
        assert get_logger("my_module").name == "ampbox.my_module"

    def test_prefix_not_duplicated(self) -> None:
        assert get_logger("ampbox.docker").name == "ampbox.docker"

    def test_caches_loggers(self) -> None:
        assert get_logger("cached_module") is get_logger("cached_module")


class TestSetDebug:
    """Tests for set_debug function."""

    def test_enable_debug(self) -> None:
        set_debug(True)
        assert logging.getLogger("ampbox").level == logging.DEBUG

    def test_disable_debug(self) -> None:
        set_debug(False)
        assert logging.getLogger("ampbox").level == logging.WARNING

    def test_disable_keeps_file_logging_at_info(self, tmp_path: Path) -> None:
        add_phase_log_file(tmp_path, "launcher")
        set_debug(False)
        assert logging.getLogger("ampbox").level == logging.INFO


class TestInitLogging:
    """Tests for _init_logging function."""

    def test_idempotent(self) -> None:
        _init_logging()
        _init_logging()
        _init_logging()

    def test_adds_handler(self) -> None:
        _init_logging()
        assert len(logging.getLogger("ampbox").handlers) >= 1


class TestPhaseLogFile:
    """Tests for per-phase rotating log files."""

    def test_creates_directory_and_file(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "data" / "logs"
        handler = add_phase_log_file(log_dir, "entrypoint")
        get_logger("phase_test").info("Configuration verified")
        handler.flush()

        content = (log_dir / "entrypoint.log").read_text(encoding="utf-8")
        assert "Configuration verified" in content
        assert "[INFO]" in content

    def test_rotation_policy(self, tmp_path: Path) -> None:
        handler = add_phase_log_file(tmp_path, "launcher")
        assert handler.when == "MIDNIGHT"
        assert handler.backupCount == 7

    def test_remove_handler(self, tmp_path: Path) -> None:
        handler = add_phase_log_file(tmp_path, "launcher")
        remove_log_handler(handler)
        assert handler not in logging.getLogger("ampbox").handlers

    def test_debug_lines_not_written(self, tmp_path: Path) -> None:
        handler = add_phase_log_file(tmp_path, "launcher")
        get_logger("phase_test").debug("noisy detail")
        handler.flush()
        assert "noisy detail" not in (tmp_path / "launcher.log").read_text(encoding="utf-8")


class TestLoggerIntegration:
    """Integration tests for logging usage."""

    def test_logger_can_log(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="ampbox"):
            get_logger("integration_test").debug("Test message")
            assert "Test message" in caplog.text

    def test_logger_respects_level(self, caplog: pytest.LogCaptureFixture) -> None:
        set_debug(False)
        with caplog.at_level(logging.WARNING, logger="ampbox"):
            logger = get_logger("level_test")
            logger.debug("Debug message")
            logger.warning("Warning message")
            assert "Debug message" not in caplog.text
            assert "Warning message" in caplog.text
