"""
TurboTest orchestration emoji definitions.

Emojis for change detection, caching, process execution and results.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class TurboEmoji(ComponentEmoji):
    """
    Parallel lint/test orchestration emojis.

    Categories:
        - Testing: Test execution and results
        - Lint: Lint execution
        - Cache: Fingerprint cache operations
        - Git: Change detection
        - Results: Run outcome
    """

    # ============================================================
    # Testing Operations
    # ============================================================
    TEST = "🧪"  # Test execution
    TEST_PASS = "✅"  # Process passed
    TEST_FAIL = "❌"  # Process failed
    TEST_ERROR = "💥"  # Unexpected error

    # ============================================================
    # Lint Operations
    # ============================================================
    LINT = "📝"  # Lint execution

    # ============================================================
    # Cache Operations
    # ============================================================
    CACHE = "💾"  # Cache hit / persisted cache
    CACHE_CLEAR = "🗑️"  # Cache cleared
    ALL_CACHED = "✨"  # Nothing to run, all cached

    # ============================================================
    # Git Operations
    # ============================================================
    GIT = "🔀"  # Git operation
    CHANGED = "📝"  # Changed file

    # ============================================================
    # Results & Summary
    # ============================================================
    STARTUP = "🚀"  # Parallel run starting
    SUMMARY = "📊"  # Results summary
    WARNING = "⚠️"  # Warning message
    INFO = "ℹ️"  # Information

    # ============================================================
    # Execution States
    # ============================================================
    RUNNING = "▶️"  # Process started
    STOPPED = "🛑"  # Processes stopped
    DURATION = "⏱️"  # Duration/timing
