"""Pytest configuration and fixtures for ampbox tests.

This module ensures the ampbox package is importable during tests
without requiring installation.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

# Add src directory to path for development testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ampbox.logging import remove_log_handler, set_debug  # noqa: E402
from ampbox.paths import detect_host_environment, is_wsl  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_detection_caches() -> Iterator[None]:
    """Host detection is cached per process; tests patch its inputs."""
    is_wsl.cache_clear()
    detect_host_environment.cache_clear()
    yield
    is_wsl.cache_clear()
    detect_host_environment.cache_clear()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop phase log files attached during a test and restore the default level."""
    yield
    root_logger = logging.getLogger("ampbox")
    for handler in list(root_logger.handlers):
        if isinstance(handler, TimedRotatingFileHandler):
            remove_log_handler(handler)
    set_debug(False)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """An existing target project directory."""
    project = tmp_path / "proj"
    project.mkdir()
    (project / "README.md").write_text("# proj\n")
    return project
