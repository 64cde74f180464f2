"""
Base class for emoji registry components.

Provides foundation for emoji category classes with
consistent structure and introspection support.
"""

from typing import Dict, List


class ComponentEmoji:
    """
    Base class for component-specific emoji collections.

    Each subclass represents a semantic category. Class attributes
    define emojis as constants; no instance methods are needed.

    Example:
        >>> class MyEmoji(ComponentEmoji):
        ...     HELLO = "👋"
    """

    @classmethod
    def get_all(cls) -> Dict[str, str]:
        """
        Get all emoji definitions from this category.

        Returns:
            Dictionary mapping emoji name to emoji character
        """
        return {
            name: value
            for klass in reversed(cls.__mro__)
            for name, value in vars(klass).items()
            if name.isupper() and isinstance(value, str)
        }

    @classmethod
    def list_names(cls) -> List[str]:
        """
        Get list of all emoji names in this category.

        Returns:
            Sorted list of emoji constant names
        """
        return sorted(cls.get_all())

    @classmethod
    def format(cls, name: str, message: str) -> str:
        """
        Prefix a message with the named emoji.

        Unknown names leave the message unchanged.

        Args:
            name: Emoji constant name (e.g. "TEST_PASS")
            message: Message text

        Returns:
            Formatted message
        """
        emoji = cls.get_all().get(name.upper())
        if not emoji:
            return message
        return f"{emoji} {message}"
