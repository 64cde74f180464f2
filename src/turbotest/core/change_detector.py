"""
Change detector - discovers locally changed files via git.

Uses ``git status --porcelain`` so that staged, unstaged and untracked
files are all reported with a stable two-character status code.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

from shared.reporter.emojis import TurboEmoji
from shared.reporter.system_reporter import SystemReporter

from turbotest.core.models import ChangeRecord, ChangeType

STATUS_COMMAND = ["git", "status", "--porcelain"]

_TYPE_BY_CODE = {
    "A": ChangeType.ADDED,
    "D": ChangeType.DELETED,
    "R": ChangeType.RENAMED,
}


def _unquote(path: str) -> str:
    """Strip porcelain quoting from paths with special characters."""
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return path[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return path


def classify_status(status_code: str) -> ChangeType:
    """
    Map a two-character porcelain code to a change type.

    Only the first (index) character decides, except for ``??``.
    """
    if status_code == "??":
        return ChangeType.UNTRACKED
    return _TYPE_BY_CODE.get(status_code[:1], ChangeType.MODIFIED)


def parse_status_output(output: str) -> List[ChangeRecord]:
    """
    Parse porcelain status output into change records.

    Args:
        output: Raw ``git status --porcelain`` output

    Returns:
        Records in original order
    """
    changes = []

    for line in output.splitlines():
        if not line.strip():
            continue

        status_code = line[:2]
        path = line[2:].strip()

        change_type = classify_status(status_code)

        # Renames are reported as "old -> new"; the new path is what exists
        if change_type is ChangeType.RENAMED and " -> " in path:
            path = path.split(" -> ", 1)[1]

        path = _unquote(path)
        if path:
            changes.append(ChangeRecord(status_code, path, change_type))

    return changes


class ChangeDetector:
    """
    Detects changed files using git status.

    Never raises: a failing status query yields an empty change list.
    """

    def __init__(
        self,
        project_root: Path,
        reporter: Optional[SystemReporter] = None,
        timeout: int = 10,
    ):
        """
        Initialize change detector.

        Args:
            project_root: Root directory of project
            reporter: Optional reporter for logging
            timeout: Status query timeout in seconds
        """
        self.project_root = project_root
        self.timeout = timeout
        self.reporter = reporter or SystemReporter(
            name="change_detector", level=20, verbose=1
        )

    def detect_changes(self) -> List[ChangeRecord]:
        """
        Get locally modified files and their change type.

        Returns:
            List of ChangeRecord, empty if git is unavailable
        """
        try:
            result = subprocess.run(
                STATUS_COMMAND,
                cwd=str(self.project_root),
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit code {e.returncode}"
            self.reporter.error(
                f"{TurboEmoji.TEST_FAIL} Error detecting git changes: {detail}",
                context="ChangeDetector",
            )
            return []
        except subprocess.TimeoutExpired:
            self.reporter.error(
                f"{TurboEmoji.TEST_FAIL} Git status timed out after {self.timeout}s",
                context="ChangeDetector",
            )
            return []
        except OSError as e:
            self.reporter.error(
                f"{TurboEmoji.TEST_FAIL} Could not run git: {e}",
                context="ChangeDetector",
            )
            return []

        changes = parse_status_output(result.stdout)

        self.reporter.debug(
            f"{TurboEmoji.GIT} {len(changes)} changed file(s)",
            context="ChangeDetector",
        )

        return changes
