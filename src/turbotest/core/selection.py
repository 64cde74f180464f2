"""
Selection engine - decides which specs and lint targets must run.

Combines the change list with the fingerprint cache:
- a spec is re-run when its own hash or its companion source's hash
  differs from the recorded one,
- a lint target is re-run only when its own hash differs, whatever
  its recorded pass/fail status.

Pairing between a source file and its spec is a fixed naming rule:
the first occurrence of the source suffix is replaced by the spec
suffix (``foo.component.ts`` <-> ``foo.component.spec.ts``).
"""

from typing import Iterable, List, Optional, Sequence

from shared.reporter.emojis import TurboEmoji
from shared.reporter.system_reporter import SystemReporter

from turbotest.core.fingerprint_store import FingerprintStore
from turbotest.core.models import ChangeRecord, FingerprintCache, SelectionResult


def spec_counterpart(
    path: str, source_suffix: str = ".ts", spec_suffix: str = ".spec.ts"
) -> str:
    """Spec file paired with a source file (first-occurrence substitution)."""
    return path.replace(source_suffix, spec_suffix, 1)


def companion_source(
    spec: str, source_suffix: str = ".ts", spec_suffix: str = ".spec.ts"
) -> str:
    """Source file paired with a spec file (first-occurrence substitution)."""
    return spec.replace(spec_suffix, source_suffix, 1)


def _unique(paths: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first-seen order."""
    return list(dict.fromkeys(paths))


class SelectionEngine:
    """
    Computes run-vs-skip sets for the test and lint tracks.
    """

    def __init__(
        self,
        store: FingerprintStore,
        spec_suffix: str = ".spec.ts",
        source_suffix: str = ".ts",
        lint_extensions: Sequence[str] = (".ts", ".html"),
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize selection engine.

        Args:
            store: Fingerprint store used for hashing and existence checks
            spec_suffix: Suffix identifying spec files
            source_suffix: Suffix identifying source files with specs
            lint_extensions: Extensions handed to the lint tool
            reporter: Optional reporter for logging
        """
        self.store = store
        self.spec_suffix = spec_suffix
        self.source_suffix = source_suffix
        self.lint_extensions = tuple(lint_extensions)
        self.reporter = reporter or store.reporter

    def is_spec(self, path: str) -> bool:
        return path.endswith(self.spec_suffix)

    def spec_for(self, path: str) -> str:
        return spec_counterpart(path, self.source_suffix, self.spec_suffix)

    def source_for(self, spec: str) -> str:
        return companion_source(spec, self.source_suffix, self.spec_suffix)

    def spec_candidates(self, changes: Sequence[ChangeRecord]) -> List[str]:
        """
        Spec files affected by the changes, restricted to existing files.

        Args:
            changes: Detected change records

        Returns:
            Ordered unique spec paths
        """
        candidates = []

        for change in changes:
            path = change.path

            if self.is_spec(path):
                candidates.append(path)
            elif path.endswith(self.source_suffix):
                candidates.append(self.spec_for(path))

        return [path for path in _unique(candidates) if self.store.exists(path)]

    def select_specs(
        self, changes: Sequence[ChangeRecord], cache: FingerprintCache
    ) -> SelectionResult:
        """
        Partition affected spec files into to-run and cached.

        Args:
            changes: Detected change records
            cache: Current fingerprint cache (read only here)

        Returns:
            SelectionResult for the test track
        """
        result = SelectionResult()
        result.candidates = self.spec_candidates(changes)

        for spec in result.candidates:
            entry = cache.spec(spec)
            spec_changed = entry is None or entry.hash != self.store.hash_file(spec)

            source = self.source_for(spec)
            source_hash = self.store.hash_file(source)
            source_entry = cache.source(source)
            source_changed = source_hash is not None and (
                source_entry is None or source_entry.hash != source_hash
            )

            if spec_changed or source_changed:
                result.to_run.append(spec)
            else:
                result.cached.append(spec)

        self.reporter.debug(
            f"{TurboEmoji.TEST} Specs: {len(result.to_run)} to run, "
            f"{len(result.cached)} cached",
            context="SelectionEngine",
        )

        return result

    def lint_candidates(self, changes: Sequence[ChangeRecord]) -> List[str]:
        """
        Changed files with a lintable extension that still exist.

        Args:
            changes: Detected change records

        Returns:
            Ordered unique file paths
        """
        paths = [
            change.path
            for change in changes
            if change.path.endswith(self.lint_extensions)
        ]
        return [path for path in _unique(paths) if self.store.exists(path)]

    def select_lint(
        self, changes: Sequence[ChangeRecord], cache: FingerprintCache
    ) -> SelectionResult:
        """
        Partition lintable changed files into to-run and cached.

        Args:
            changes: Detected change records
            cache: Current fingerprint cache (read only here)

        Returns:
            SelectionResult for the lint track
        """
        result = SelectionResult()

        if not changes:
            return result

        result.candidates = self.lint_candidates(changes)

        for path in result.candidates:
            entry = cache.lint(path)

            if entry is None or entry.hash != self.store.hash_file(path):
                result.to_run.append(path)
            else:
                result.cached.append(path)

        self.reporter.debug(
            f"{TurboEmoji.LINT} Lint: {len(result.to_run)} to run, "
            f"{len(result.cached)} cached",
            context="SelectionEngine",
        )

        return result
