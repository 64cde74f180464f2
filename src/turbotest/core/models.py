"""
TurboTest data models.

Shared data structures used by:
- change_detector (produces ChangeRecord)
- fingerprint_store (persists CacheEntry)
- selection (produces SelectionResult)
- coordinator (produces ExecutionOutcome)
- classifier (produces Classification)

These models define the contract between the pipeline stages.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set

SOURCE_PREFIX = "source:"
LINT_PREFIX = "lint:"

LINT_JOB = "Lint"
TEST_JOB = "Test"


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


class ChangeType(Enum):
    """Kind of local change reported by version control."""

    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNTRACKED = "untracked"


@dataclass(frozen=True)
class ChangeRecord:
    """
    One locally changed file.

    Produced per run from the status query, never persisted.
    """

    status_code: str
    path: str
    change_type: ChangeType


class CacheStatus(Enum):
    """Recorded outcome of a tracked file."""

    PASSED = "passed"
    FAILED = "failed"


@dataclass
class CacheEntry:
    """
    Persisted hash/outcome/error record for a tracked file.

    Serialized as ``{hash, status, timestamp, error?}``.
    """

    hash: str
    status: CacheStatus
    timestamp: int = field(default_factory=now_ms)
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status is CacheStatus.PASSED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "hash": self.hash,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        """
        Build an entry from its persisted form.

        Raises:
            ValueError: If the record is malformed
        """
        if not isinstance(data, dict):
            raise ValueError("cache entry must be an object")

        file_hash = data.get("hash")
        if not isinstance(file_hash, str) or not file_hash:
            raise ValueError("cache entry has no hash")

        status = CacheStatus(data.get("status"))

        timestamp = data.get("timestamp", 0)
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("cache entry timestamp must be a number")

        error = data.get("error")
        if error is not None and not isinstance(error, str):
            error = str(error)

        return cls(hash=file_hash, status=status, timestamp=int(timestamp), error=error)


class FingerprintCache:
    """
    Mutable file -> CacheEntry mapping for one run.

    Keys live in three namespaces: bare path (spec files),
    ``source:<path>`` (companion sources) and ``lint:<path>``
    (lint targets). Instances are passed by reference through
    selection, cache writing and reporting.
    """

    def __init__(self, entries: Optional[Dict[str, CacheEntry]] = None):
        self.entries: Dict[str, CacheEntry] = dict(entries or {})

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def get(self, key: str) -> Optional[CacheEntry]:
        return self.entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        self.entries[key] = entry

    # Namespace helpers
    def spec(self, path: str) -> Optional[CacheEntry]:
        return self.entries.get(path)

    def source(self, path: str) -> Optional[CacheEntry]:
        return self.entries.get(f"{SOURCE_PREFIX}{path}")

    def lint(self, path: str) -> Optional[CacheEntry]:
        return self.entries.get(f"{LINT_PREFIX}{path}")

    def set_spec(self, path: str, entry: CacheEntry) -> None:
        self.entries[path] = entry

    def set_source(self, path: str, entry: CacheEntry) -> None:
        self.entries[f"{SOURCE_PREFIX}{path}"] = entry

    def set_lint(self, path: str, entry: CacheEntry) -> None:
        self.entries[f"{LINT_PREFIX}{path}"] = entry

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {key: entry.to_dict() for key, entry in self.entries.items()}


@dataclass
class SelectionResult:
    """
    Run-vs-skip decision for one track (tests or lint).

    ``to_run`` and ``cached`` are ordered and free of duplicates.
    ``candidates`` holds every considered path in first-seen order.
    """

    to_run: List[str] = field(default_factory=list)
    cached: List[str] = field(default_factory=list)
    candidates: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.to_run and not self.cached


class ProcessStatus(Enum):
    """Final status of a launched process."""

    PASSED = "PASSED"
    FAILED = "FAILED"


@dataclass
class ExecutionOutcome:
    """Result of one external process run."""

    name: str
    exit_code: int
    output: str
    duration_ms: int
    cancelled: bool = False

    @property
    def status(self) -> ProcessStatus:
        return ProcessStatus.PASSED if self.exit_code == 0 else ProcessStatus.FAILED

    @property
    def passed(self) -> bool:
        return self.exit_code == 0


class FailureKind(Enum):
    """Shape of a failed process' output."""

    SUMMARY = "summary"  # structured TOTAL line
    COMPILE = "compile"  # compiler diagnostics
    FALLBACK = "fallback"  # best-effort tail of the output
    INCOMPLETE = "incomplete"  # truncated / still building
    LINT = "lint"  # lint diagnostics
    CANCELLED = "cancelled"  # terminated after a sibling failed


@dataclass
class Classification:
    """
    Verdict extracted from raw process output.

    ``failed_files`` is only meaningful for COMPILE (files named in the
    diagnostics) and LINT (files referenced by the linter).
    """

    kind: FailureKind
    summary: str
    cacheable: bool = True
    failed_files: Set[str] = field(default_factory=set)


@dataclass
class RunReport:
    """Everything the final report needs about one run."""

    outcomes: List[ExecutionOutcome] = field(default_factory=list)
    reasons: Dict[str, str] = field(default_factory=dict)
    lint: SelectionResult = field(default_factory=SelectionResult)
    tests: SelectionResult = field(default_factory=SelectionResult)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)
