"""
Unit tests for ChangeDetector.

Tests porcelain status parsing and git failure handling.

Usage:
    pytest tests/unit/test_change_detector.py
"""

import subprocess

from turbotest.core import change_detector as change_detector_module
from turbotest.core.change_detector import (
    ChangeDetector,
    classify_status,
    parse_status_output,
)
from turbotest.core.models import ChangeType


class TestParseStatusOutput:
    """Unit tests for porcelain output parsing."""

    # ============================================================
    # Status codes
    # ============================================================

    def test_status_codes_map_to_change_types(self):
        """Test first status character decides the change type."""
        assert classify_status(" M") is ChangeType.MODIFIED
        assert classify_status("M ") is ChangeType.MODIFIED
        assert classify_status("A ") is ChangeType.ADDED
        assert classify_status("D ") is ChangeType.DELETED
        assert classify_status("R ") is ChangeType.RENAMED
        assert classify_status("??") is ChangeType.UNTRACKED

    def test_parse_preserves_order_and_paths(self):
        """Test records keep the order of the status output."""
        output = (
            " M src/app/foo.component.ts\n"
            "?? src/app/new.component.spec.ts\n"
            "A  src/app/added.ts\n"
        )

        changes = parse_status_output(output)

        assert [c.path for c in changes] == [
            "src/app/foo.component.ts",
            "src/app/new.component.spec.ts",
            "src/app/added.ts",
        ]
        assert [c.change_type for c in changes] == [
            ChangeType.MODIFIED,
            ChangeType.UNTRACKED,
            ChangeType.ADDED,
        ]
        assert changes[0].status_code == " M"

    def test_blank_lines_are_skipped(self):
        """Test empty and whitespace-only lines are ignored."""
        changes = parse_status_output("\n M a.ts\n   \n")

        assert len(changes) == 1
        assert changes[0].path == "a.ts"

    # ============================================================
    # Renames and quoting
    # ============================================================

    def test_rename_yields_destination_path(self):
        """Test rename lines report the new path."""
        changes = parse_status_output("R  src/old.ts -> src/new.ts\n")

        assert changes[0].path == "src/new.ts"
        assert changes[0].change_type is ChangeType.RENAMED

    def test_quoted_path_is_unquoted(self):
        """Test porcelain quoting is removed."""
        changes = parse_status_output(' M "src/with space.ts"\n')

        assert changes[0].path == "src/with space.ts"


class TestChangeDetector:
    """Unit tests for the git status query."""

    def test_detect_changes_parses_git_output(self, tmp_path, reporter, monkeypatch):
        """Test successful status query is parsed."""

        def fake_run(command, **kwargs):
            assert command == ["git", "status", "--porcelain"]
            assert kwargs["cwd"] == str(tmp_path)
            return subprocess.CompletedProcess(command, 0, " M src/a.ts\n", "")

        monkeypatch.setattr(change_detector_module.subprocess, "run", fake_run)

        changes = ChangeDetector(tmp_path, reporter).detect_changes()

        assert [c.path for c in changes] == ["src/a.ts"]

    def test_git_failure_returns_empty_list(self, tmp_path, reporter, monkeypatch):
        """Test nonzero git exit degrades to no changes."""

        def fake_run(command, **kwargs):
            raise subprocess.CalledProcessError(
                128, command, stderr="fatal: not a git repository"
            )

        monkeypatch.setattr(change_detector_module.subprocess, "run", fake_run)

        assert ChangeDetector(tmp_path, reporter).detect_changes() == []

    def test_missing_git_returns_empty_list(self, tmp_path, reporter, monkeypatch):
        """Test missing git executable degrades to no changes."""

        def fake_run(command, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(change_detector_module.subprocess, "run", fake_run)

        assert ChangeDetector(tmp_path, reporter).detect_changes() == []

    def test_timeout_returns_empty_list(self, tmp_path, reporter, monkeypatch):
        """Test hanging git degrades to no changes."""

        def fake_run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        monkeypatch.setattr(change_detector_module.subprocess, "run", fake_run)

        assert ChangeDetector(tmp_path, reporter, timeout=1).detect_changes() == []
