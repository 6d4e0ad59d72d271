"""Operating-system helpers: a wrapping millisecond clock and the console width."""

import os
import time

DEFAULT_CONSOLE_WIDTH = 80


def get_millisecond_counter():
    """Return wall-clock milliseconds truncated to 32 bits."""
    return (time.time_ns() // 1_000_000) & 0xFFFFFFFF


def get_console_width():
    """Return the terminal width of stdin, or 80 when it cannot be determined."""
    try:
        columns = os.get_terminal_size(0).columns
    except (OSError, ValueError):
        return DEFAULT_CONSOLE_WIDTH
    return columns if columns > 0 else DEFAULT_CONSOLE_WIDTH