"""Terminal-safe log output with Unicode fallback.

Detects terminal encoding and provides ASCII alternatives for the Unicode
glyphs rubymap prints, so output does not crash terminals that don't
support UTF-8, and configures stdlib logging to go through the same filter.
"""
import locale
import logging
import sys


# Unicode to ASCII icon mapping for non-UTF-8 terminals
ICON_MAP = {
    # Status icons
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',

    # Arrows used in relation listings
    '→': '->',
    '←': '<-',
    '↻': '(cycle)',
    '⇒': '=>',

    # Symbols
    '…': '...',
    '•': '*',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    # Try stdout encoding first
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    # Fallback to locale
    try:
        return locale.getpreferredencoding().lower()
    except (locale.Error, ValueError):
        pass

    return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can handle UTF-8 Unicode characters."""
    return detect_terminal_encoding() in ('utf-8', 'utf8', 'utf_8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if terminal doesn't support UTF-8.

    Args:
        text: Text potentially containing Unicode icons

    Returns:
        str: Sanitized text safe for current terminal
    """
    if is_utf8_capable():
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)
    return sanitized


class SanitizingFormatter(logging.Formatter):
    """Formatter that runs every rendered record through sanitize_for_terminal."""

    def format(self, record: logging.LogRecord) -> str:
        return sanitize_for_terminal(super().format(record))


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.WARNING) -> logging.Handler:
    """Send rubymap log records to stderr at ``level``.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Logging level name or number

    Returns:
        The installed handler
    """
    logger = logging.getLogger('rubymap')
    for handler in list(logger.handlers):
        if getattr(handler, '_rubymap', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(SanitizingFormatter(LOG_FORMAT))
    handler._rubymap = True
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
