"""
TurboTest core components.
"""

from turbotest.core.cache_writer import CacheWriter
from turbotest.core.change_detector import ChangeDetector, parse_status_output
from turbotest.core.classifier import (
    ResultClassifier,
    classify_lint_output,
    classify_test_output,
    filter_errors_by_file,
)
from turbotest.core.coordinator import (
    ExecutionCoordinator,
    Job,
    build_lint_command,
    build_test_command,
)
from turbotest.core.fingerprint_store import FingerprintStore
from turbotest.core.orchestrator import TurboTest
from turbotest.core.process_control import ProcessTerminator, get_terminator
from turbotest.core.reporter import TurboReporter
from turbotest.core.selection import SelectionEngine

__all__ = [
    "CacheWriter",
    "ChangeDetector",
    "ExecutionCoordinator",
    "FingerprintStore",
    "Job",
    "ProcessTerminator",
    "ResultClassifier",
    "SelectionEngine",
    "TurboReporter",
    "TurboTest",
    "build_lint_command",
    "build_test_command",
    "classify_lint_output",
    "classify_test_output",
    "filter_errors_by_file",
    "get_terminator",
    "parse_status_output",
]
