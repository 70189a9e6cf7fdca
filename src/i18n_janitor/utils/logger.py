"""Terminal-safe output and logging for i18n-janitor.

Detects whether the terminal can render UTF-8 and swaps the status icons
used in reports for ASCII equivalents when it cannot (legacy Windows
consoles). Also provides the package loggers, rendered through Rich.
"""
import locale
import logging
import os
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


# Unicode to ASCII icon mapping for non-UTF-8 terminals
ICON_MAP = {
    '✓': '[OK]',
    '✅': '[OK]',
    '✗': '[FAIL]',
    '❌': '[FAIL]',
    '⚠': '[WARN]',
    '⚡': '[!]',
    '→': '->',
    '←': '<-',
    '…': '...',
    '•': '*',
    '🌐': '[locale]',
    '🔍': '[search]',
    '🧹': '[janitor]',
    '👀': '[watch]',
}

LOG_LEVEL_ENV = 'I18N_LOG_LEVEL'


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        Lower-cased encoding name ('utf-8', 'cp1252', 'ascii', ...)
    """
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    """True if the terminal can print Unicode icons."""
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents on non-UTF-8 terminals."""
    if is_utf8_capable():
        return text

    for unicode_char, ascii_replacement in ICON_MAP.items():
        text = text.replace(unicode_char, ascii_replacement)
    return text


class SafeConsole(Console):
    """Rich Console that sanitizes string output for legacy terminals."""

    def __init__(self, *args, **kwargs):
        self._needs_sanitization = not is_utf8_capable()
        if self._needs_sanitization:
            kwargs['legacy_windows'] = True
        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)

    def status(self, *args, **kwargs):
        # ASCII spinner: - \ | /
        if self._needs_sanitization:
            kwargs['spinner'] = 'line'
        return super().status(*args, **kwargs)


_configured = False


def _configure_root() -> None:
    """Attach a single RichHandler to the package root logger."""
    global _configured
    if _configured:
        return

    level_name = os.getenv(LOG_LEVEL_ENV, 'WARNING').upper()
    level = getattr(logging, level_name, logging.WARNING)

    handler = RichHandler(
        console=SafeConsole(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter('%(message)s'))

    package_logger = logging.getLogger('i18n_janitor')
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the i18n_janitor namespace.

    Args:
        name: Usually the calling module's __name__

    Returns:
        Configured Logger instance
    """
    _configure_root()
    return logging.getLogger(name)
