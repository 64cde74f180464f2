"""
Test fixtures and configuration.
"""

import os
from pathlib import Path
from typing import Callable

import pytest
from shared.reporter.system_reporter import SystemReporter

from turbotest.config import reset_settings
from turbotest.core.fingerprint_store import FingerprintStore


@pytest.fixture
def reporter() -> SystemReporter:
    """Reporter that only lets critical messages through."""
    return SystemReporter(name="turbotest_test", level=10, verbose=0)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Empty project root."""
    return tmp_path


@pytest.fixture
def write_file(project: Path) -> Callable[[str, str], Path]:
    """Create a file (and its parents) under the project root."""

    def _write(relative: str, content: str = "") -> Path:
        path = project / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def store(project: Path, reporter: SystemReporter) -> FingerprintStore:
    """Fingerprint store rooted at the project."""
    return FingerprintStore(project, reporter=reporter)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from TURBO_* variables and the settings singleton."""
    for key in list(os.environ):
        if key.startswith("TURBO_"):
            monkeypatch.delenv(key, raising=False)

    reset_settings()
    yield
    reset_settings()
