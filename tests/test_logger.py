"""Tests for terminal-safe output and log configuration."""
import logging

from rubymap.utils import logger as logger_module
from rubymap.utils.logger import SanitizingFormatter, configure_logging, sanitize_for_terminal


class TestSanitize:
    """Unicode fallback."""

    def test_utf8_terminal_keeps_text(self, monkeypatch):
        monkeypatch.setattr(logger_module, 'is_utf8_capable', lambda: True)
        assert sanitize_for_terminal('✓ done → next') == '✓ done → next'

    def test_ascii_terminal_replaces_icons(self, monkeypatch):
        monkeypatch.setattr(logger_module, 'is_utf8_capable', lambda: False)
        assert sanitize_for_terminal('✓ done → next ↻') == '[OK] done -> next (cycle)'

    def test_formatter_sanitizes_records(self, monkeypatch):
        monkeypatch.setattr(logger_module, 'is_utf8_capable', lambda: False)
        record = logging.LogRecord('rubymap.test', logging.WARNING, __file__, 1, '✗ failed', None, None)
        assert SanitizingFormatter('%(message)s').format(record) == '[FAIL] failed'


class TestConfigureLogging:
    """Handler installation on the rubymap logger."""

    def test_sets_level(self):
        configure_logging('DEBUG')
        assert logging.getLogger('rubymap').level == logging.DEBUG
        configure_logging('WARNING')

    def test_replaces_previous_handler(self):
        first = configure_logging()
        second = configure_logging()
        handlers = logging.getLogger('rubymap').handlers
        assert second in handlers
        assert first not in handlers
