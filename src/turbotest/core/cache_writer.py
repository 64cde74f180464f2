"""
Cache writer - records process outcomes into the fingerprint cache.

Runs from the coordinator's completion callback, once per finished
process. Each call mutates the shared FingerprintCache in place and
persists it in full through the store.
"""

from typing import Optional, Sequence

from shared.reporter.emojis import TurboEmoji
from shared.reporter.system_reporter import SystemReporter

from turbotest.core.classifier import filter_errors_by_file, mentioned_files
from turbotest.core.fingerprint_store import FingerprintStore
from turbotest.core.models import (
    LINT_JOB,
    CacheEntry,
    CacheStatus,
    Classification,
    ExecutionOutcome,
    FailureKind,
    FingerprintCache,
)
from turbotest.core.selection import companion_source


class CacheWriter:
    """
    Translates outcome + classification into cache entries.
    """

    def __init__(
        self,
        store: FingerprintStore,
        spec_suffix: str = ".spec.ts",
        source_suffix: str = ".ts",
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize cache writer.

        Args:
            store: Fingerprint store used for hashing and persistence
            spec_suffix: Suffix identifying spec files
            source_suffix: Suffix of companion source files
            reporter: Optional reporter for logging
        """
        self.store = store
        self.spec_suffix = spec_suffix
        self.source_suffix = source_suffix
        self.reporter = reporter or store.reporter

    def record(
        self,
        outcome: ExecutionOutcome,
        classification: Optional[Classification],
        attempted: Sequence[str],
        cache: FingerprintCache,
    ) -> int:
        """
        Write the entries implied by one finished process.

        Args:
            outcome: Finished process
            classification: Classifier verdict (None when passed)
            attempted: Files handed to the process
            cache: Cache to mutate

        Returns:
            Number of file entries written (0 means nothing was persisted)
        """
        if not attempted:
            return 0

        if not outcome.passed and (
            classification is None or not classification.cacheable
        ):
            self.reporter.debug(
                f"{TurboEmoji.CACHE} {outcome.name}: outcome not cacheable",
                context="CacheWriter",
            )
            return 0

        if outcome.name == LINT_JOB:
            written = self._record_lint(outcome, classification, attempted, cache)
        else:
            written = self._record_tests(outcome, classification, attempted, cache)

        if written:
            self.store.save(cache)
            self.reporter.debug(
                f"{TurboEmoji.CACHE} {outcome.name}: {written} entries saved",
                context="CacheWriter",
            )

        return written

    def _record_lint(
        self,
        outcome: ExecutionOutcome,
        classification: Optional[Classification],
        attempted: Sequence[str],
        cache: FingerprintCache,
    ) -> int:
        failed = set()
        error = None

        if not outcome.passed:
            error = classification.summary
            failed = mentioned_files(classification.failed_files, attempted)

        written = 0
        for path in attempted:
            file_hash = self.store.hash_file(path)
            if file_hash is None:
                continue

            if path in failed:
                entry = CacheEntry(file_hash, CacheStatus.FAILED, error=error)
            else:
                entry = CacheEntry(file_hash, CacheStatus.PASSED)

            cache.set_lint(path, entry)
            written += 1

        return written

    def _record_tests(
        self,
        outcome: ExecutionOutcome,
        classification: Optional[Classification],
        attempted: Sequence[str],
        cache: FingerprintCache,
    ) -> int:
        if outcome.passed:
            return sum(
                self._record_spec(spec, CacheStatus.PASSED, None, cache)
                for spec in attempted
            )

        targets = list(attempted)
        if classification.kind is FailureKind.COMPILE:
            named = mentioned_files(classification.failed_files, attempted)
            targets = [spec for spec in attempted if spec in named]

        written = 0
        for spec in targets:
            excerpt = filter_errors_by_file(
                classification.summary, spec, self.spec_suffix
            )
            written += self._record_spec(spec, CacheStatus.FAILED, excerpt, cache)

        return written

    def _record_spec(
        self,
        spec: str,
        status: CacheStatus,
        error: Optional[str],
        cache: FingerprintCache,
    ) -> int:
        """Record a spec file and its companion source; returns entries written."""
        written = 0

        spec_hash = self.store.hash_file(spec)
        if spec_hash is not None:
            cache.set_spec(spec, CacheEntry(spec_hash, status, error=error))
            written = 1

        source = companion_source(spec, self.source_suffix, self.spec_suffix)
        source_hash = self.store.hash_file(source)
        if source_hash is not None:
            cache.set_source(source, CacheEntry(source_hash, status))
            written += 1

        return written
