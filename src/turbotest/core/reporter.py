"""
TurboTest reporter - creates Rich renderable objects for run results.

Responsible for:
- Creating Rich visual components (Panels, Text)
- Formatting selection, results and cache statistics
- NOT responsible for printing/rendering

The orchestrator handles actual rendering via Rich Console.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from rich.panel import Panel
from rich.text import Text

from shared.reporter.emojis import TurboEmoji

from turbotest.core.models import (
    CacheEntry,
    ChangeRecord,
    FingerprintCache,
    RunReport,
    SelectionResult,
)

PANEL_WIDTH = 67
SHORT_REASON = 20


class TurboReporter:
    """
    Creates Rich renderable objects for a TurboTest run.

    Returns Rich objects (Panel, Text) that can be rendered by a Rich
    Console. Does not handle printing itself.
    """

    def __init__(self):
        """Initialize reporter."""

    def create_changes_text(self, changes: Sequence[ChangeRecord]) -> Text:
        """
        Create debug listing of detected changes.

        Args:
            changes: Detected change records

        Returns:
            Rich Text object
        """
        content = Text()
        content.append("DEBUG - Detected changes:\n", style="dim")
        for change in changes:
            content.append(f"  {change.path}", style="dim")
            content.append(f"  [{change.status_code.strip()}]\n", style="dim")
        return content

    def create_selection_panel(
        self, lint: SelectionResult, tests: SelectionResult
    ) -> Optional[Panel]:
        """
        Create Rich Panel listing skipped and selected files per track.

        Args:
            lint: Lint selection
            tests: Test selection

        Returns:
            Rich Panel object, or None if both selections are empty
        """
        sections = [
            (f"{TurboEmoji.CACHE} Lint cached (skipped)", lint.cached, "cyan"),
            (f"{TurboEmoji.LINT} Linting files", lint.to_run, "white"),
            (f"{TurboEmoji.CACHE} Cached (skipped)", tests.cached, "cyan"),
            (f"{TurboEmoji.TEST} Testing files", tests.to_run, "white"),
        ]
        sections = [section for section in sections if section[1]]

        if not sections:
            return None

        content = Text()

        for title, files, style in sections:
            content.append("\n")
            content.append(f"  {title} ({len(files)}):\n", style=f"bold {style}")
            self._append_tree(content, files, style)

        return Panel(
            content,
            title="[bold] Selection[/bold]",
            border_style="white",
            padding=(0, 1),
            width=PANEL_WIDTH,
        )

    def create_run_banner(self, job_names: Sequence[str]) -> Panel:
        """
        Create Rich Panel announcing the parallel run.

        Args:
            job_names: Names of the jobs about to start

        Returns:
            Rich Panel object
        """
        content = Text()
        content.append("\n")
        content.append(f"  {TurboEmoji.STARTUP} ", style="bold")
        content.append("TURBO TEST - Running in parallel...\n", style="bold")
        content.append(f"     {' + '.join(job_names)}\n", style="dim")

        return Panel(
            content,
            border_style="blue",
            padding=(0, 1),
            width=PANEL_WIDTH,
        )

    def create_results_panel(
        self, report: RunReport, cache: FingerprintCache
    ) -> Panel:
        """
        Create Rich Panel for the end-of-run report.

        Args:
            report: Outcomes, failure reasons and selections of the run
            cache: Cache after all outcomes were recorded

        Returns:
            Rich Panel object with per-process status and cache stats
        """
        content = Text()
        content.append("\n")

        for outcome in report.outcomes:
            if outcome.passed:
                icon, style = TurboEmoji.TEST_PASS, "green"
            else:
                icon, style = TurboEmoji.TEST_FAIL, "red"

            content.append(
                f"  {icon} {outcome.name}: {outcome.status.value}", style=style
            )
            content.append(f"  ({outcome.duration_ms / 1000:.2f}s)\n", style="dim")

            reason = report.reasons.get(outcome.name)
            if reason:
                self._append_reason(content, reason)

        self._append_cache_stats(content, report.lint, report.tests, cache)

        content.append("\n")
        content.append(
            f"  {TurboEmoji.DURATION} Total time: {report.duration:.2f}s\n",
            style="cyan",
        )

        if report.success:
            status_text, status_style = "PASSED", "green"
        else:
            status_text, status_style = "FAILED", "red"

        return Panel(
            content,
            title=f"[bold]{TurboEmoji.SUMMARY} Results[/bold]",
            border_style=status_style,
            subtitle=f"[bold {status_style}]{status_text}[/bold {status_style}]",
            padding=(0, 1),
            width=PANEL_WIDTH,
        )

    def create_all_cached_panel(
        self,
        lint: SelectionResult,
        tests: SelectionResult,
        cache: FingerprintCache,
        duration: float,
    ) -> Panel:
        """
        Create Rich Panel for a run where nothing had to be executed.

        Args:
            lint: Lint selection (only cached files)
            tests: Test selection (only cached files)
            cache: Current cache
            duration: Elapsed time in seconds

        Returns:
            Rich Panel object
        """
        content = Text()
        self._append_cache_stats(content, lint, tests, cache)

        content.append("\n")
        content.append(
            f"  {TurboEmoji.DURATION} Total time: {duration:.2f}s\n", style="cyan"
        )

        return Panel(
            content,
            title=f"[bold]{TurboEmoji.ALL_CACHED} TURBO TEST - All cached![/bold]",
            border_style="blue",
            padding=(0, 1),
            width=PANEL_WIDTH,
        )

    def create_nothing_to_do(self) -> Text:
        """Create message for a run with no lintable or testable files."""
        return Text(f"{TurboEmoji.WARNING}  No files found to process.", style="yellow")

    def create_cache_cleared(self, removed: bool) -> Text:
        if removed:
            return Text(f"{TurboEmoji.CACHE_CLEAR} Cache cleared", style="cyan")
        return Text(f"{TurboEmoji.INFO} No cache to clear", style="dim")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _append_tree(self, content: Text, files: Sequence[str], style: str) -> None:
        """Append files as a tree-style list."""
        for index, path in enumerate(files):
            branch = "└─" if index == len(files) - 1 else "├─"
            content.append(f"     {branch} ", style="dim")
            content.append(f"{path}\n", style=style)

    def _append_reason(self, content: Text, reason: str) -> None:
        """Append a failure reason under its process line."""
        first, *rest = reason.split("\n")

        if (
            "incomplete" in reason
            or "interrupted" in reason
            or len(reason) < SHORT_REASON
        ):
            content.append(f"     └─ {TurboEmoji.WARNING}  {first}\n", style="yellow")
        else:
            content.append(f"     └─ {first}\n", style="dim")

        for line in rest:
            content.append(f"        {line}\n", style="dim")

    def _append_cache_stats(
        self,
        content: Text,
        lint: SelectionResult,
        tests: SelectionResult,
        cache: FingerprintCache,
    ) -> None:
        """Append cache-hit counts split by passing and failing."""
        tracks: List[Tuple[str, str, Sequence[str], Callable]] = [
            ("Lint Cached", "file(s)", lint.cached, cache.lint),
            ("Test Cached", "test(s)", tests.cached, cache.spec),
        ]

        for label, unit, files, lookup in tracks:
            if not files:
                continue

            passing: List[str] = []
            failing: List[Tuple[str, CacheEntry]] = []

            for path in files:
                entry = lookup(path)
                if entry is None:
                    continue
                if entry.passed:
                    passing.append(path)
                else:
                    failing.append((path, entry))

            content.append("\n")

            if not failing:
                content.append(
                    f"  {TurboEmoji.CACHE} {label}: {len(passing)} {unit} "
                    f"skipped (all passing)\n",
                    style="cyan",
                )
                continue

            if passing:
                content.append(
                    f"  {TurboEmoji.CACHE} {label}: {len(files)} {unit} skipped "
                    f"({len(passing)} passing, {len(failing)} failing)\n",
                    style="yellow",
                )
            else:
                content.append(
                    f"  {TurboEmoji.CACHE} {label}: {len(failing)} {unit} "
                    f"skipped (all failing)\n",
                    style="red",
                )

            for path, entry in failing:
                content.append(f"     {TurboEmoji.TEST_FAIL} {path}\n", style="red")
                if entry.error:
                    for line in entry.error.split("\n"):
                        content.append(f"        {line}\n", style="dim")
