"""Logging utilities for hexoffice.

Provides color-coded, tagged console output. Messages below ``Config.LOG_LEVEL``
are dropped so pure queries stay quiet unless the host asks for detail.
"""

import os
from enum import Enum

from .config import Config, LOG_LEVELS


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Debug / layout computations
    YELLOW = "\033[93m"    # Soft errors (orphans, ambiguous layouts)
    RED = "\033[91m"       # Errors
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


# Markers for message types (color-blind accessible)
EMOJI_DEBUG = "[•]"
EMOJI_WARNING = "[!]"
EMOJI_ERROR = "[x]"
EMOJI_SUCCESS = "[✓]"
EMOJI_INFO = "[i]"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if HEXOFFICE_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("HEXOFFICE_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def is_enabled(level: str) -> bool:
    """Return True when messages at ``level`` pass the configured threshold."""
    threshold = Config.LOG_LEVEL if Config.LOG_LEVEL in LOG_LEVELS else "WARNING"
    return LOG_LEVELS.index(level) >= LOG_LEVELS.index(threshold)


def _emit(level: str, marker: str, message: str, color: Color) -> None:
    if is_enabled(level):
        print(colored(f"{marker} {message}", color))


def log_debug(message: str) -> None:
    """Log a layout computation detail (blue)."""
    _emit("DEBUG", EMOJI_DEBUG, message, Color.BLUE)


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    _emit("INFO", EMOJI_INFO, message, Color.CYAN)


def log_success(message: str) -> None:
    """Log a success (green)."""
    _emit("INFO", EMOJI_SUCCESS, message, Color.GREEN)


def log_warning(message: str) -> None:
    """Log a recoverable data problem (yellow)."""
    _emit("WARNING", EMOJI_WARNING, message, Color.YELLOW)


def log_error(message: str) -> None:
    """Log an error (red)."""
    _emit("ERROR", EMOJI_ERROR, message, Color.RED)
