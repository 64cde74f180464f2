"""
Execution coordinator - runs lint and test tools as parallel processes.

All jobs are launched back-to-back inside one asyncio event loop.
Output of every child is streamed to the terminal as it arrives and
accumulated for classification. The first process that exits nonzero
triggers termination of every sibling still running; the coordinator
then waits until each tracked process has exited before returning.
"""

import asyncio
import shlex
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from shared.reporter.emojis import TurboEmoji
from shared.reporter.system_reporter import SystemReporter

from turbotest.core.models import ExecutionOutcome
from turbotest.core.process_control import ProcessTerminator, get_terminator

CHUNK_SIZE = 4096
EXIT_NOT_FOUND = 127


@dataclass
class Job:
    """A named external command."""

    name: str
    command: List[str]

    @property
    def display(self) -> str:
        return shlex.join(self.command)


def build_lint_command(
    files: Sequence[str],
    lint_command: Sequence[str] = ("npx", "eslint"),
    fix_flag: str = "--fix",
) -> Optional[List[str]]:
    """
    Lint invocation for a batch of files with auto-fix enabled.

    Returns:
        Command list, or None when there is nothing to lint
    """
    if not files:
        return None

    command = [*lint_command, *files]
    if fix_flag:
        command.append(fix_flag)
    return command


def build_test_command(
    specs: Sequence[str],
    test_command: Sequence[str] = ("npx", "ng", "test"),
    include_flag: str = "--include",
    test_args: Sequence[str] = (),
) -> Optional[List[str]]:
    """
    Test invocation with one inclusion filter per spec file.

    Returns:
        Command list, or None when there are no specs to run
    """
    if not specs:
        return None

    includes = [f"{include_flag}={spec}" for spec in specs]
    return [*test_command, *includes, *test_args]


def _write(sink: Any, chunk: bytes) -> None:
    """Write raw bytes to a binary or text stream."""
    target = getattr(sink, "buffer", None)
    if target is not None:
        target.write(chunk)
        target.flush()
    else:
        sink.write(chunk.decode("utf-8", errors="replace"))
        sink.flush()


class ExecutionCoordinator:
    """
    Launches jobs concurrently and cancels siblings on first failure.
    """

    def __init__(
        self,
        project_root: Path,
        terminator: Optional[ProcessTerminator] = None,
        reporter: Optional[SystemReporter] = None,
        echo: bool = True,
    ):
        """
        Initialize execution coordinator.

        Args:
            project_root: Working directory for child processes
            terminator: Process-tree terminator (default: platform specific)
            reporter: Optional reporter for logging
            echo: Stream child output to this process' stdout/stderr
        """
        self.project_root = project_root
        self.terminator = terminator or get_terminator()
        self.echo = echo
        self.reporter = reporter or SystemReporter(
            name="coordinator", level=20, verbose=1
        )

        self._processes: Dict[str, Any] = {}
        self._terminated: Set[str] = set()
        self._failed = False

    def run(
        self,
        jobs: Sequence[Job],
        on_complete: Optional[Callable[[ExecutionOutcome], None]] = None,
    ) -> List[ExecutionOutcome]:
        """
        Run jobs to completion (blocking wrapper around run_async).

        Args:
            jobs: Jobs to launch
            on_complete: Called once per job, in completion order

        Returns:
            Outcomes in job order
        """
        return asyncio.run(self.run_async(jobs, on_complete))

    async def run_async(
        self,
        jobs: Sequence[Job],
        on_complete: Optional[Callable[[ExecutionOutcome], None]] = None,
    ) -> List[ExecutionOutcome]:
        """
        Launch every job, stream output and wait for all to exit.

        Args:
            jobs: Jobs to launch
            on_complete: Called once per job, in completion order

        Returns:
            Outcomes in job order
        """
        self._processes = {}
        self._terminated = set()
        self._failed = False

        if not jobs:
            return []

        launched = []
        total = len(jobs)

        try:
            # Every job is tracked before any exit is observed
            for index, job in enumerate(jobs, start=1):
                self.reporter.info(
                    f"{TurboEmoji.RUNNING} [{index}/{total}] Starting {job.name}...",
                    context="Coordinator",
                )
                self.reporter.info(f"   Command: {job.display}", context="Coordinator")

                started = time.monotonic()
                process, error = await self._spawn(job)
                if process is not None:
                    self._processes[job.name] = process
                launched.append((job, process, error, started))

            tasks = [
                asyncio.create_task(
                    self._supervise(job, process, error, started, on_complete)
                )
                for job, process, error, started in launched
            ]

            return list(await asyncio.gather(*tasks))

        except (asyncio.CancelledError, KeyboardInterrupt):
            # Children run in their own session and never see the terminal's Ctrl+C
            self.cancel_all()
            raise

    async def _spawn(self, job: Job):
        """Start a job; returns (process, None) or (None, error message)."""
        executable = shutil.which(job.command[0]) or job.command[0]

        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *job.command[1:],
                cwd=str(self.project_root),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **self.terminator.spawn_options(),
            )
        except OSError as e:
            self.reporter.error(
                f"{TurboEmoji.TEST_ERROR} Could not start {job.name}: {e}",
                context="Coordinator",
            )
            return None, f"Could not start {job.command[0]}: {e}"

        return process, None

    async def _supervise(
        self,
        job: Job,
        process: Any,
        error: Optional[str],
        started: float,
        on_complete: Optional[Callable[[ExecutionOutcome], None]],
    ) -> ExecutionOutcome:
        """Collect output of one process, react to its exit."""
        if process is None:
            outcome = ExecutionOutcome(
                name=job.name,
                exit_code=EXIT_NOT_FOUND,
                output=error or "",
                duration_ms=int((time.monotonic() - started) * 1000),
            )
        else:
            buffer = bytearray()
            await asyncio.gather(
                self._pump(process.stdout, buffer, "stdout"),
                self._pump(process.stderr, buffer, "stderr"),
            )
            exit_code = await process.wait()
            self._processes.pop(job.name, None)

            outcome = ExecutionOutcome(
                name=job.name,
                exit_code=exit_code,
                output=buffer.decode("utf-8", errors="replace"),
                duration_ms=int((time.monotonic() - started) * 1000),
                cancelled=job.name in self._terminated and exit_code != 0,
            )

        if outcome.passed:
            self.reporter.info(
                f"{TurboEmoji.TEST_PASS} {job.name} completed successfully",
                context="Coordinator",
            )
        elif outcome.cancelled:
            self.reporter.warning(
                f"{TurboEmoji.STOPPED} {job.name} stopped", context="Coordinator"
            )
        else:
            self.reporter.error(
                f"{TurboEmoji.TEST_FAIL} {job.name} failed "
                f"(exit code {outcome.exit_code})",
                context="Coordinator",
            )
            if not self._failed:
                self._failed = True
                self.cancel_all(except_name=job.name)

        if on_complete is not None:
            on_complete(outcome)

        return outcome

    async def _pump(self, stream: Any, buffer: bytearray, sink_name: str) -> None:
        """Copy a child stream into the buffer and, optionally, the terminal."""
        if stream is None:
            return

        while True:
            chunk = await stream.read(CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            if self.echo:
                _write(getattr(sys, sink_name), chunk)

    def cancel_all(self, except_name: Optional[str] = None) -> None:
        """
        Terminate every tracked process that is still running.

        Args:
            except_name: Job that triggered the cancellation
        """
        running = {
            name: process
            for name, process in self._processes.items()
            if name != except_name and process.returncode is None
        }
        if not running:
            return

        self.reporter.warning(
            f"{TurboEmoji.STOPPED} Stopping all processes...", context="Coordinator"
        )

        for name, process in running.items():
            self._terminated.add(name)
            self.terminator.terminate(process)
