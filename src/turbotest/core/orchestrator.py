"""
TurboTest orchestrator - main coordinator for a lint/test run.

Coordinates:
- Change detection (git status)
- Selection (fingerprint cache lookups)
- Parallel execution (lint + test processes)
- Classification and cache writes (per finished process)
- Reporting (display results)
"""

import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.console import Console
from shared.reporter.emojis import TurboEmoji
from shared.reporter.system_reporter import SystemReporter

from turbotest.config import Settings, get_settings
from turbotest.core.cache_writer import CacheWriter
from turbotest.core.change_detector import ChangeDetector
from turbotest.core.classifier import ResultClassifier
from turbotest.core.coordinator import (
    ExecutionCoordinator,
    Job,
    build_lint_command,
    build_test_command,
)
from turbotest.core.fingerprint_store import FingerprintStore
from turbotest.core.models import (
    LINT_JOB,
    TEST_JOB,
    ExecutionOutcome,
    FingerprintCache,
    RunReport,
    SelectionResult,
)
from turbotest.core.reporter import TurboReporter
from turbotest.core.selection import SelectionEngine


class TurboTest:
    """
    Main orchestrator for the TurboTest runner.

    Detects changed files, skips work whose fingerprints are unchanged,
    runs the rest in parallel and records the outcomes.
    """

    def __init__(
        self,
        project_root: Optional[Path] = None,
        settings: Optional[Settings] = None,
        reporter: Optional[SystemReporter] = None,
        console: Optional[Console] = None,
        change_detector: Optional[ChangeDetector] = None,
        coordinator: Optional[ExecutionCoordinator] = None,
    ):
        """
        Initialize TurboTest orchestrator.

        Args:
            project_root: Project root directory (default: cwd)
            settings: Configuration (default: global settings)
            reporter: Logger (default: built from settings)
            console: Rich console for panels
            change_detector: Change detector override
            coordinator: Execution coordinator override
        """
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.settings = settings or get_settings()

        self.reporter = reporter or SystemReporter(
            name="turbotest",
            log_dir=self.settings.log_dir,
            level=10 if self.settings.verbose >= 3 else 20,
            verbose=self.settings.verbose,
        )

        self.store = FingerprintStore(
            self.project_root, self.settings.cache_file, self.reporter
        )
        self.selection = SelectionEngine(
            self.store,
            spec_suffix=self.settings.spec_suffix,
            source_suffix=self.settings.source_suffix,
            lint_extensions=self.settings.lint_extensions,
            reporter=self.reporter,
        )
        self.classifier = ResultClassifier(
            source_suffix=self.settings.source_suffix,
            lint_extensions=self.settings.lint_extensions,
        )
        self.cache_writer = CacheWriter(
            self.store,
            spec_suffix=self.settings.spec_suffix,
            source_suffix=self.settings.source_suffix,
            reporter=self.reporter,
        )
        self.change_detector = change_detector or ChangeDetector(
            self.project_root, self.reporter
        )
        self.coordinator = coordinator or ExecutionCoordinator(
            self.project_root, reporter=self.reporter
        )

        # Display reporter and Rich console
        self.display_reporter = TurboReporter()
        self.console = console or Console()

    def run(
        self,
        disable_lint: bool = False,
        disable_cache: bool = False,
        clear_cache: bool = False,
        debug: bool = False,
    ) -> bool:
        """
        Run one lint/test cycle.

        Args:
            disable_lint: Skip the lint track
            disable_cache: Ignore recorded outcomes for selection
            clear_cache: Delete the persisted cache first
            debug: Print the detected changes

        Returns:
            True if nothing failed (including all-cached / nothing to do)
        """
        start_time = time.time()

        self.reporter.info(
            f"{TurboEmoji.STARTUP} TurboTest starting in {self.project_root}",
            context="TurboTest",
        )

        if clear_cache:
            removed = self.store.clear()
            self.console.print(self.display_reporter.create_cache_cleared(removed))

        changes = self.change_detector.detect_changes()

        if debug:
            self.console.print(self.display_reporter.create_changes_text(changes))

        # Loaded once; outcomes of this run are merged into it even when
        # selection is told to ignore it.
        cache = self.store.load()
        selection_view = FingerprintCache() if disable_cache else cache

        if disable_lint:
            lint = SelectionResult()
        else:
            lint = self.selection.select_lint(changes, selection_view)
        tests = self.selection.select_specs(changes, selection_view)

        selection_panel = self.display_reporter.create_selection_panel(lint, tests)
        if selection_panel is not None:
            self.console.print(selection_panel)

        jobs, attempted = self._build_jobs(lint, tests)

        if not jobs:
            if lint.cached or tests.cached:
                self.console.print(
                    self.display_reporter.create_all_cached_panel(
                        lint, tests, cache, time.time() - start_time
                    )
                )
            else:
                self.console.print(self.display_reporter.create_nothing_to_do())
            return True

        self.console.print(
            self.display_reporter.create_run_banner([job.name for job in jobs])
        )

        report = RunReport(lint=lint, tests=tests)

        def on_complete(outcome: ExecutionOutcome) -> None:
            classification = self.classifier.classify(outcome)
            if classification is not None:
                report.reasons[outcome.name] = classification.summary

            self.cache_writer.record(
                outcome, classification, attempted[outcome.name], cache
            )

        report.outcomes = self.coordinator.run(jobs, on_complete)
        report.duration = time.time() - start_time

        self.console.print(self.display_reporter.create_results_panel(report, cache))

        if report.success:
            self.reporter.info(
                f"{TurboEmoji.TEST_PASS} All processes passed", context="TurboTest"
            )
        else:
            failed = [o.name for o in report.outcomes if not o.passed]
            self.reporter.error(
                f"{TurboEmoji.TEST_FAIL} Failed: {', '.join(failed)}",
                context="TurboTest",
            )

        return report.success

    def _build_jobs(
        self, lint: SelectionResult, tests: SelectionResult
    ) -> Tuple[List[Job], Dict[str, List[str]]]:
        """
        Build the lint/test jobs for the selected files.

        Returns:
            (jobs in launch order, attempted files per job name)
        """
        jobs = []
        attempted = {}

        lint_command = build_lint_command(
            lint.to_run, self.settings.lint_command, self.settings.lint_fix_flag
        )
        if lint_command:
            jobs.append(Job(LINT_JOB, lint_command))
            attempted[LINT_JOB] = list(lint.to_run)

        test_command = build_test_command(
            tests.to_run,
            self.settings.test_command,
            self.settings.test_include_flag,
            self.settings.test_args,
        )
        if test_command:
            jobs.append(Job(TEST_JOB, test_command))
            attempted[TEST_JOB] = list(tests.to_run)

        return jobs, attempted
