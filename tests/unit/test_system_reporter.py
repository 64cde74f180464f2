"""
Unit tests for SystemReporter and the emoji registry.

Usage:
    pytest tests/unit/test_system_reporter.py
"""

import logging

from shared.reporter.emojis import ComponentEmoji, TurboEmoji
from shared.reporter.system_reporter import SystemReporter


def read_log(reporter):
    for handler in reporter.logger.handlers:
        handler.flush()
    with open(reporter.log_file, encoding="utf-8") as f:
        return f.read()


class TestSystemReporter:
    """Unit tests for logging with verbosity filter."""

    def test_file_log_uses_context_format(self, tmp_path):
        """Test messages are written as '[context] message'."""
        reporter = SystemReporter(name="sr_format", log_dir=str(tmp_path))

        reporter.info("cache loaded", context="FingerprintStore")

        assert reporter.log_file == str(tmp_path / "sr_format.log")
        content = read_log(reporter)
        assert "| INFO     | [FingerprintStore] cache loaded" in content

    def test_verbose_filter(self, tmp_path):
        """Test messages above the verbosity level are dropped."""
        reporter = SystemReporter(
            name="sr_verbose", log_dir=str(tmp_path), level=logging.DEBUG, verbose=1
        )

        reporter.debug("hidden detail")
        reporter.info("visible info")
        reporter.error("visible error")

        content = read_log(reporter)
        assert "hidden detail" not in content
        assert "visible info" in content
        assert "visible error" in content

    def test_set_verbose_is_clamped(self):
        """Test verbosity stays within 0-3."""
        reporter = SystemReporter(name="sr_clamp", verbose=9)
        assert reporter.verbose == 3

        reporter.set_verbose(-4)
        assert reporter.verbose == 0

    def test_repeated_construction_does_not_duplicate_handlers(self):
        """Test handlers are replaced for a reused logger name."""
        SystemReporter(name="sr_reuse")
        reporter = SystemReporter(name="sr_reuse")

        assert len(reporter.logger.handlers) == 1


class TestEmojis:
    """Unit tests for the emoji registry."""

    def test_registry_introspection(self):
        """Test subclass constants are discoverable."""
        names = TurboEmoji.list_names()

        assert "CACHE" in names
        assert names == sorted(names)
        assert TurboEmoji.get_all()["TEST_PASS"] == TurboEmoji.TEST_PASS
        assert ComponentEmoji.get_all() == {}

    def test_format(self):
        """Test messages are prefixed with the named emoji."""
        assert TurboEmoji.format("cache", "saved") == f"{TurboEmoji.CACHE} saved"
        assert TurboEmoji.format("unknown", "plain") == "plain"
