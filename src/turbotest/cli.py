"""
TurboTest CLI - Command-line interface for the lint/test runner.

Runs lint and tests for locally changed files in parallel, skipping
files whose content has not changed since their last recorded run.

All diagnostics via SystemReporter with TurboEmoji.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from shared.reporter.emojis import TurboEmoji
from shared.reporter.system_reporter import SystemReporter

from turbotest.config import ConfigError, load_config
from turbotest.core.orchestrator import TurboTest

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="turbotest",
        description="Parallel lint & test runner with smart caching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  turbotest                     # Run lint and test with caching
  turbotest --disable-lint      # Skip linting, run only tests
  turbotest --disable-cache     # Ignore cache, run all changed files
  turbotest --clear-cache       # Clear cache and run all changed files
  turbotest --debug             # Also print detected changes

Cache:
  Default location: .vscode/.turbo-cache.json
  Tracks both passing and failing files
  Invalidates on file content changes
        """,
    )

    parser.add_argument(
        "--disable-lint",
        action="store_true",
        help="Skip linting, run only tests",
    )
    parser.add_argument(
        "--disable-cache",
        action="store_true",
        help="Ignore recorded outcomes when selecting files",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete the cache file before running",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Print detected changes"
    )
    parser.add_argument(
        "--config",
        metavar="YAML",
        help="Configuration file (default: turbo.yaml in the project root)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    project_root = Path.cwd()

    cli_reporter = SystemReporter(
        name="turbotest_cli",
        level=10 if args.verbose else 20,
        verbose=3 if args.verbose else 1,
    )

    try:
        settings = load_config(project_root, args.config)
        if args.verbose:
            settings = settings.model_copy(update={"verbose": 3})

        turbo = TurboTest(project_root=project_root, settings=settings)

        success = turbo.run(
            disable_lint=args.disable_lint,
            disable_cache=args.disable_cache,
            clear_cache=args.clear_cache,
            debug=args.debug,
        )

        return EXIT_OK if success else EXIT_FAILED

    except ConfigError as e:
        cli_reporter.error(f"{TurboEmoji.TEST_ERROR} {e}", context="CLI")
        return EXIT_ERROR

    except KeyboardInterrupt:
        cli_reporter.warning(
            f"{TurboEmoji.STOPPED} Run interrupted by user", context="CLI"
        )
        return EXIT_ERROR

    except Exception as e:
        cli_reporter.error(f"{TurboEmoji.TEST_ERROR} Fatal error: {e}", context="CLI")
        if args.verbose:
            import traceback

            cli_reporter.error(traceback.format_exc(), context="CLI")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
