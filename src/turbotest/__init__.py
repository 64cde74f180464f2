"""
TurboTest - change-aware parallel lint/test runner.

Detects locally changed files, skips lint and test work whose content
fingerprints are unchanged since the last recorded run, and runs the
rest as concurrent external processes.
"""

__version__ = "0.1.0"
