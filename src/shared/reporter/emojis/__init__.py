"""Emoji definitions for system reporting."""

from shared.reporter.emojis.base_emojis import ComponentEmoji
from shared.reporter.emojis.turbo_emojis import TurboEmoji

__all__ = [
    "ComponentEmoji",
    "TurboEmoji",
]
