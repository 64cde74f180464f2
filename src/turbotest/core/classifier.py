"""
Result classifier - turns raw tool output into verdicts.

Test runner output is unstructured and shared by every spec in the
batch, so verdicts are recovered heuristically:

1. ``TOTAL: <f> FAILED, <s> SUCCESS`` summary -> failure section
2. compiler diagnostics (``[ERROR] TS...``) -> diagnostic excerpt and
   the files they name
3. in-progress / empty output -> incomplete, never cached
4. anything else -> tail of the output

Lint output yields a diagnostic summary plus the set of referenced
files. filter_errors_by_file() attributes a shared failure text back
to one spec file.
"""

import re
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set

from turbotest.core.models import (
    LINT_JOB,
    Classification,
    ExecutionOutcome,
    FailureKind,
)

SUMMARY_RE = re.compile(r"TOTAL:\s*(\d+)\s*FAILED,\s*(\d+)\s*SUCCESS")
ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
PLUGIN_SUFFIX_RE = re.compile(r"\s*\[plugin.*?\]\s*$")
LINE_COLUMN_RE = re.compile(r"^\d+:\d+")

TOTAL_MARKER = "TOTAL:"
FAILED_MARKER = "FAILED"
EXECUTED_MARKER = "Executed"
RUNNER_MARKER = "Chrome Headless"
COVERAGE_MARKER = "Coverage"
COVERAGE_SUMMARY_MARKER = "Coverage summary"
COMPILE_ERROR_MARKER = "[ERROR] TS"
BUNDLE_FAILED_MARKER = "Application bundle generation failed"
IN_PROGRESS_MARKER = "Building"
SOURCE_ROOT = "src/"
LINT_FAIL_GLYPH = "✖"

INCOMPLETE_MESSAGE = "Test execution incomplete or interrupted"
CANCELLED_MESSAGE = "Process interrupted after another process failed"
COMPILE_FALLBACK_MESSAGE = "Compilation failed - check TypeScript errors"
NO_SUMMARY_MESSAGE = "Test execution failed - no summary found"

MAX_DIAGNOSTIC_LINES = 6
LOCATION_LOOKAHEAD = 10
ATTRIBUTION_LOOKAHEAD = 15
TAIL_LINES = 5


class _State(Enum):
    SCANNING = "scanning"
    IN_BLOCK = "in_block"
    CAPTURED = "captured"


def strip_ansi(text: str) -> str:
    """Remove terminal colour/control sequences."""
    return ANSI_RE.sub("", text)


def normalize_path(path: str) -> str:
    """Use forward slashes regardless of the tool's platform."""
    return path.replace("\\", "/")


def path_matches(reference: str, path: str) -> bool:
    """
    Check whether a path referenced in tool output denotes ``path``.

    Tools print project-relative or absolute paths; both match a
    project-relative path on a directory boundary.
    """
    reference = normalize_path(reference)
    path = normalize_path(path)
    return reference == path or reference.endswith(f"/{path}")


def mentioned_files(references: Iterable[str], paths: Iterable[str]) -> Set[str]:
    """Paths from ``paths`` that appear among ``references``."""
    references = list(references)
    return {
        path
        for path in paths
        if any(path_matches(reference, path) for reference in references)
    }


def extract_paths(text: str, extensions: Sequence[str]) -> Set[str]:
    """
    Collect every file path with one of the extensions.

    Windows drive paths and POSIX paths are both recognised; the
    result uses forward slashes.
    """
    if not extensions:
        return set()

    alternatives = "|".join(
        re.escape(ext) for ext in sorted(set(extensions), key=len, reverse=True)
    )
    pattern = re.compile(
        r"((?:[A-Za-z]:)?[\w.@~/\\-]+?(?:%s))(?![\w])" % alternatives
    )
    return {normalize_path(match) for match in pattern.findall(text)}


def has_compile_errors(text: str) -> bool:
    return COMPILE_ERROR_MARKER in text or BUNDLE_FAILED_MARKER in text


def _is_case_failure(line: str) -> bool:
    return FAILED_MARKER in line and RUNNER_MARKER in line


def _is_execution_summary(line: str) -> bool:
    return EXECUTED_MARKER in line and RUNNER_MARKER in line


def extract_failure_section(lines: Sequence[str]) -> List[str]:
    """
    Lines from the first failing case up to the TOTAL/coverage summary.

    Args:
        lines: Output lines

    Returns:
        Captured lines (empty if no failing case was seen)
    """
    state = _State.SCANNING
    section = []

    for line in lines:
        if state is _State.SCANNING:
            starts_block = (
                FAILED_MARKER in line
                and COVERAGE_MARKER not in line
                and TOTAL_MARKER not in line
            )
            if not starts_block:
                continue
            state = _State.IN_BLOCK

        if TOTAL_MARKER in line or COVERAGE_SUMMARY_MARKER in line:
            state = _State.CAPTURED
            break

        section.append(line)

    return section


def extract_compile_diagnostics(lines: Sequence[str]) -> List[str]:
    """
    Compiler messages, each followed by its ``src/`` location if found.

    At most MAX_DIAGNOSTIC_LINES lines are returned.
    """
    excerpt: List[str] = []

    for index, line in enumerate(lines):
        if COMPILE_ERROR_MARKER not in line:
            continue

        message = line[line.index("[ERROR]") + len("[ERROR] ") :].strip()
        message = PLUGIN_SUFFIX_RE.sub("", message).strip()
        if message:
            excerpt.append(message)

        for candidate in lines[index + 1 : index + LOCATION_LOOKAHEAD]:
            candidate = candidate.strip()
            if candidate.startswith(SOURCE_ROOT) and ":" in candidate:
                location = ":".join(candidate.split(":")[:3])
                excerpt.append(f"  at {location}")
                break

        if len(excerpt) >= MAX_DIAGNOSTIC_LINES:
            break

    return excerpt[:MAX_DIAGNOSTIC_LINES]


def classify_test_output(
    raw: str, source_suffix: str = ".ts"
) -> Classification:
    """
    Classify the output of a failed test process.

    Args:
        raw: Combined stdout/stderr of the test tool
        source_suffix: Suffix used to spot file names in diagnostics

    Returns:
        Classification (INCOMPLETE is never cacheable)
    """
    text = strip_ansi(raw)
    lines = text.split("\n")

    match = SUMMARY_RE.search(text)
    if match:
        failed_count = int(match.group(1))
        success_count = int(match.group(2))
        total = failed_count + success_count

        summary = (
            f"TOTAL: {total}, FAILED: {failed_count}, SUCCESS: {success_count}"
        )
        section = extract_failure_section(lines)
        if section:
            summary += "\n" + "\n".join(section)

        return Classification(kind=FailureKind.SUMMARY, summary=summary)

    if has_compile_errors(text):
        diagnostics = extract_compile_diagnostics(lines)

        if diagnostics:
            summary = "\n".join(diagnostics)
        else:
            error_lines = [
                line for line in lines if "ERROR" in line or SOURCE_ROOT in line
            ][:TAIL_LINES]
            summary = (
                "\n".join(error_lines) if error_lines else COMPILE_FALLBACK_MESSAGE
            )

        return Classification(
            kind=FailureKind.COMPILE,
            summary=summary,
            failed_files=extract_paths(text, [source_suffix]),
        )

    meaningful = [
        line for line in lines if line.strip() and IN_PROGRESS_MARKER not in line
    ]

    if IN_PROGRESS_MARKER in text or not meaningful:
        return Classification(
            kind=FailureKind.INCOMPLETE,
            summary=INCOMPLETE_MESSAGE,
            cacheable=False,
        )

    summary = "\n".join(meaningful[-TAIL_LINES:]) or NO_SUMMARY_MESSAGE
    return Classification(kind=FailureKind.FALLBACK, summary=summary)


def classify_lint_output(
    raw: str, extensions: Sequence[str] = (".ts", ".html")
) -> Classification:
    """
    Classify the output of a failed lint process.

    Args:
        raw: Combined stdout/stderr of the lint tool
        extensions: Lintable extensions, used to extract failed files

    Returns:
        Classification with the referenced files in ``failed_files``
    """
    text = strip_ansi(raw)
    lines = [line for line in text.split("\n") if line.strip()]

    diagnostic_lines = [
        line
        for line in lines
        if "error" in line
        or "warning" in line
        or LINT_FAIL_GLYPH in line
        or LINE_COLUMN_RE.match(line.strip())
    ]

    if diagnostic_lines:
        summary = "\n".join(diagnostic_lines)
    else:
        summary = "\n".join(lines[-TAIL_LINES:])

    return Classification(
        kind=FailureKind.LINT,
        summary=summary,
        failed_files=extract_paths(text, extensions),
    )


def filter_errors_by_file(
    full_error: str, file_path: str, spec_suffix: str = ".spec.ts"
) -> str:
    """
    Keep only the parts of a shared failure text that concern one spec.

    When several spec files run in one batch their failures are
    interleaved; a block is kept when the target path shows up shortly
    after its failure line, and dropped once another spec file appears.

    Args:
        full_error: Complete failure text of the batch
        file_path: Spec file to attribute errors to
        spec_suffix: Suffix identifying spec files

    Returns:
        Filtered text, or the unfiltered text if nothing matched
    """
    lines = full_error.split("\n")
    filtered: List[str] = []

    total_line = next((line for line in lines if TOTAL_MARKER in line), None)
    if total_line is not None:
        filtered.append(total_line)
    baseline = len(filtered)

    state = _State.SCANNING

    for index, line in enumerate(lines):
        if _is_case_failure(line):
            if _block_mentions(lines, index, file_path):
                state = _State.IN_BLOCK
                filtered.append(line)
            else:
                state = _State.SCANNING
            continue

        if _is_execution_summary(line):
            if state is _State.IN_BLOCK or file_path in line:
                filtered.append(line)
            state = _State.SCANNING
            continue

        if state is _State.IN_BLOCK:
            if spec_suffix in line and file_path not in line:
                state = _State.SCANNING
                continue
            filtered.append(line)

    if len(filtered) <= baseline:
        return full_error

    return "\n".join(filtered)


def _block_mentions(lines: Sequence[str], start: int, file_path: str) -> bool:
    """Does the failure block starting at ``start`` reference the file?"""
    for line in lines[start + 1 : start + ATTRIBUTION_LOOKAHEAD]:
        if file_path in line:
            return True
        if RUNNER_MARKER in line and (
            FAILED_MARKER in line or EXECUTED_MARKER in line
        ):
            return False
    return False


class ResultClassifier:
    """
    Classifies finished processes by track.
    """

    def __init__(
        self,
        source_suffix: str = ".ts",
        lint_extensions: Sequence[str] = (".ts", ".html"),
    ):
        self.source_suffix = source_suffix
        self.lint_extensions = tuple(lint_extensions)

    def classify(self, outcome: ExecutionOutcome) -> Optional[Classification]:
        """
        Classify a finished process.

        Args:
            outcome: Finished process

        Returns:
            None for a passed process, otherwise its Classification
        """
        if outcome.passed:
            return None

        if outcome.cancelled:
            return Classification(
                kind=FailureKind.CANCELLED,
                summary=CANCELLED_MESSAGE,
                cacheable=False,
            )

        if outcome.name == LINT_JOB:
            return classify_lint_output(outcome.output, self.lint_extensions)

        return classify_test_output(outcome.output, self.source_suffix)
