"""Terminal-safe Console wrapper for Rich library.

Wraps Rich's Console to automatically sanitize Unicode characters
on terminals that don't support UTF-8.
"""
from rich.console import Console
from typing import Any
from .logger import sanitize_for_terminal, is_utf8_capable


class SafeConsole(Console):
    """Console wrapper that sanitizes Unicode output on non-UTF-8 terminals.

    Inherits from Rich's Console and overrides print() to automatically
    replace Unicode icons with ASCII equivalents.
    """

    def __init__(self, *args, **kwargs):
        """Initialize SafeConsole with UTF-8 capability detection.

        All arguments are passed through to Rich's Console.
        """
        self._needs_sanitization = not is_utf8_capable()

        if self._needs_sanitization:
            kwargs['legacy_windows'] = True

        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        """Print with automatic Unicode sanitization.

        Args:
            *objects: Objects to print (same as Rich Console.print)
            **kwargs: Keyword arguments (same as Rich Console.print)
        """
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)
