"""
Fingerprint store - durable file -> outcome cache.

Persists the cache as a JSON object:

    {
      "src/app/foo.spec.ts": {"hash": "...", "status": "passed", "timestamp": 1},
      "source:src/app/foo.ts": {"hash": "...", "status": "passed", ...},
      "lint:src/app/foo.ts": {"hash": "...", "status": "failed", "error": "..."}
    }

Every I/O boundary degrades instead of raising: unreadable files hash to
None, a missing or corrupt cache loads as empty and failed writes are
logged and skipped.
"""

import hashlib
import json
from pathlib import Path
from typing import Optional, Union

from shared.reporter.emojis import TurboEmoji
from shared.reporter.system_reporter import SystemReporter

from turbotest.core.models import CacheEntry, FingerprintCache

CHUNK_SIZE = 65536


class FingerprintStore:
    """Loads, persists and clears the fingerprint cache."""

    def __init__(
        self,
        project_root: Path,
        cache_file: Union[str, Path] = ".vscode/.turbo-cache.json",
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize fingerprint store.

        Args:
            project_root: Root directory that tracked paths are relative to
            cache_file: Cache location (relative to project root or absolute)
            reporter: Optional reporter for logging
        """
        self.project_root = project_root
        cache_path = Path(cache_file)
        self.cache_path = (
            cache_path if cache_path.is_absolute() else project_root / cache_path
        )
        self.reporter = reporter or SystemReporter(
            name="fingerprint_store", level=20, verbose=1
        )

    def hash_file(self, path: Union[str, Path]) -> Optional[str]:
        """
        Compute the content fingerprint of a file.

        Args:
            path: File path (relative to project root or absolute)

        Returns:
            SHA-256 hex digest, or None if the file cannot be read
        """
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.project_root / file_path

        digest = hashlib.sha256()
        try:
            with open(file_path, "rb") as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    digest.update(chunk)
        except OSError:
            return None

        return digest.hexdigest()

    def exists(self, path: Union[str, Path]) -> bool:
        """Check whether a tracked path is an existing file."""
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.project_root / file_path
        return file_path.is_file()

    def load(self) -> FingerprintCache:
        """
        Deserialize the persisted cache.

        Returns:
            FingerprintCache (empty if absent or corrupt)
        """
        if not self.cache_path.exists():
            return FingerprintCache()

        try:
            with open(self.cache_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.reporter.warning(
                f"{TurboEmoji.WARNING} Failed to load cache, starting fresh: {e}",
                context="FingerprintStore",
            )
            return FingerprintCache()

        if not isinstance(data, dict):
            self.reporter.warning(
                f"{TurboEmoji.WARNING} Cache is not a JSON object, starting fresh",
                context="FingerprintStore",
            )
            return FingerprintCache()

        cache = FingerprintCache()
        dropped = 0

        for key, raw_entry in data.items():
            try:
                cache.set(key, CacheEntry.from_dict(raw_entry))
            except (ValueError, TypeError):
                dropped += 1

        if dropped:
            self.reporter.warning(
                f"{TurboEmoji.WARNING} Dropped {dropped} malformed cache entr"
                f"{'y' if dropped == 1 else 'ies'}",
                context="FingerprintStore",
            )

        self.reporter.debug(
            f"{TurboEmoji.CACHE} Loaded {len(cache)} cache entries "
            f"from {self.cache_path}",
            context="FingerprintStore",
        )

        return cache

    def save(self, cache: FingerprintCache) -> bool:
        """
        Overwrite the persisted cache in full.

        Args:
            cache: Cache to persist

        Returns:
            True if written, False if the write failed (logged)
        """
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_path, "w", encoding="utf-8") as f:
                json.dump(cache.to_dict(), f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            self.reporter.warning(
                f"{TurboEmoji.WARNING} Failed to save cache: {e}",
                context="FingerprintStore",
            )
            return False

        return True

    def clear(self) -> bool:
        """
        Delete the persisted cache.

        Returns:
            True if a cache file was removed
        """
        if not self.cache_path.exists():
            return False

        try:
            self.cache_path.unlink()
        except OSError as e:
            self.reporter.warning(
                f"{TurboEmoji.WARNING} Failed to clear cache: {e}",
                context="FingerprintStore",
            )
            return False

        self.reporter.info(
            f"{TurboEmoji.CACHE_CLEAR} Cache cleared", context="FingerprintStore"
        )
        return True
