"""
Unit tests for CacheWriter.

Tests which entries are written for passed, failed, compile-failed,
incomplete and cancelled processes.

Usage:
    pytest tests/unit/test_cache_writer.py
"""

import pytest

from turbotest.core.cache_writer import CacheWriter
from turbotest.core.classifier import ResultClassifier
from turbotest.core.models import (
    CacheEntry,
    CacheStatus,
    ExecutionOutcome,
    FingerprintCache,
)

COMPILE_OUTPUT = """\
[ERROR] TS2304: Cannot find name 'foo'. [plugin angular-compiler]

    src/x.spec.ts:3:10:
Application bundle generation failed.
"""


@pytest.fixture
def writer(store):
    return CacheWriter(store)


@pytest.fixture
def classifier():
    return ResultClassifier()


def record(writer, classifier, cache, name, exit_code, output, attempted, **kwargs):
    outcome = ExecutionOutcome(name, exit_code, output, 100, **kwargs)
    return writer.record(outcome, classifier.classify(outcome), attempted, cache)


class TestTestTrack:
    """Unit tests for spec file entries."""

    # ============================================================
    # Passed
    # ============================================================

    def test_passed_writes_spec_and_source(
        self, writer, classifier, store, write_file
    ):
        """Test PASSED records spec and companion source as passed."""
        write_file("src/foo.component.ts", "component")
        write_file("src/foo.component.spec.ts", "spec")
        cache = FingerprintCache()

        written = record(
            writer, classifier, cache, "Test", 0, "", ["src/foo.component.spec.ts"]
        )

        assert written == 2
        spec = cache.spec("src/foo.component.spec.ts")
        source = cache.source("src/foo.component.ts")
        assert spec.passed and spec.hash == store.hash_file("src/foo.component.spec.ts")
        assert source.passed and source.hash == store.hash_file("src/foo.component.ts")
        assert store.load().spec("src/foo.component.spec.ts") is not None

    def test_unhashable_files_are_skipped(self, writer, classifier, write_file):
        """Test files deleted before recording get no entry."""
        write_file("src/a.spec.ts", "spec")
        cache = FingerprintCache()

        record(
            writer,
            classifier,
            cache,
            "Test",
            0,
            "",
            ["src/a.spec.ts", "src/deleted.spec.ts"],
        )

        assert "src/a.spec.ts" in cache
        assert "src/deleted.spec.ts" not in cache

    # ============================================================
    # Failed
    # ============================================================

    def test_summary_failure_marks_every_file(self, writer, classifier, write_file):
        """Test non-compile failures mark all attempted specs failed."""
        write_file("src/x.spec.ts", "x")
        write_file("src/y.spec.ts", "y")
        cache = FingerprintCache()

        record(
            writer,
            classifier,
            cache,
            "Test",
            1,
            "TOTAL: 1 FAILED, 3 SUCCESS\n",
            ["src/x.spec.ts", "src/y.spec.ts"],
        )

        for spec in ("src/x.spec.ts", "src/y.spec.ts"):
            entry = cache.spec(spec)
            assert entry.status is CacheStatus.FAILED
            assert entry.error.startswith("TOTAL: 4, FAILED: 1, SUCCESS: 3")

    def test_compile_failure_isolated_to_named_files(
        self, writer, classifier, store, write_file
    ):
        """Test only files named in compiler diagnostics are marked failed."""
        write_file("src/x.ts", "x")
        write_file("src/x.spec.ts", "x spec")
        write_file("src/y.spec.ts", "y spec")

        cache = FingerprintCache()
        previous = CacheEntry("old-hash", CacheStatus.PASSED, 1)
        cache.set_spec("src/y.spec.ts", previous)

        record(
            writer,
            classifier,
            cache,
            "Test",
            1,
            COMPILE_OUTPUT,
            ["src/x.spec.ts", "src/y.spec.ts"],
        )

        failed = cache.spec("src/x.spec.ts")
        assert failed.status is CacheStatus.FAILED
        assert "Cannot find name 'foo'" in failed.error
        assert cache.source("src/x.ts").status is CacheStatus.FAILED
        assert cache.spec("src/y.spec.ts") is previous

    # ============================================================
    # Not cacheable
    # ============================================================

    def test_incomplete_output_writes_nothing(
        self, writer, classifier, store, write_file
    ):
        """Test truncated output produces zero cache writes."""
        write_file("src/x.spec.ts", "x")
        cache = FingerprintCache()

        written = record(
            writer,
            classifier,
            cache,
            "Test",
            1,
            "- Building...\n",
            ["src/x.spec.ts"],
        )

        assert written == 0
        assert len(cache) == 0
        assert not store.cache_path.exists()

    def test_cancelled_outcome_writes_nothing(self, writer, classifier, write_file):
        """Test processes stopped by the coordinator are not recorded."""
        write_file("src/x.spec.ts", "x")
        cache = FingerprintCache()

        written = record(
            writer,
            classifier,
            cache,
            "Test",
            -9,
            "TOTAL: 1 FAILED, 0 SUCCESS",
            ["src/x.spec.ts"],
            cancelled=True,
        )

        assert written == 0
        assert len(cache) == 0


class TestLintTrack:
    """Unit tests for lint entries."""

    def test_passed_lint_marks_files_passed(self, writer, classifier, write_file):
        """Test PASSED lint records every attempted file."""
        write_file("src/a.ts", "a")
        write_file("src/a.html", "<p></p>")
        cache = FingerprintCache()

        record(writer, classifier, cache, "Lint", 0, "", ["src/a.ts", "src/a.html"])

        assert cache.lint("src/a.ts").passed
        assert cache.lint("src/a.html").passed

    def test_failed_lint_marks_referenced_files(
        self, writer, classifier, project, write_file
    ):
        """Test only files referenced by the linter are marked failed."""
        write_file("src/bad.ts", "let x")
        write_file("src/good.ts", "const y = 1;")
        cache = FingerprintCache()

        output = (
            f"\n{project / 'src' / 'bad.ts'}\n"
            "  1:5  error  'x' is never reassigned  prefer-const\n\n"
            "✖ 1 problem (1 error, 0 warnings)\n"
        )

        record(
            writer, classifier, cache, "Lint", 1, output, ["src/bad.ts", "src/good.ts"]
        )

        bad = cache.lint("src/bad.ts")
        assert bad.status is CacheStatus.FAILED
        assert "prefer-const" in bad.error
        assert cache.lint("src/good.ts").passed

    def test_lint_failure_naming_no_file_marks_files_passed(
        self, writer, classifier, write_file
    ):
        """Test files not named by the lint output are recorded as passed."""
        write_file("src/a.ts", "a")
        write_file("src/b.ts", "b")
        cache = FingerprintCache()

        record(
            writer,
            classifier,
            cache,
            "Lint",
            2,
            "Oops! Something went wrong! :(\nESLint couldn't find a config",
            ["src/a.ts", "src/b.ts"],
        )

        assert cache.lint("src/a.ts").status is CacheStatus.PASSED
        assert cache.lint("src/b.ts").status is CacheStatus.PASSED
