"""Level-filtered console logging."""

import sys
from enum import IntEnum


class LogLevel(IntEnum):
    """Verbosity levels; a message prints when its level is at most the current one."""

    ALWAYS = 0
    DEBUG = 1
    VERBOSE = 2
    VERBOSE_EXTREME = 3


_log_level = int(LogLevel.ALWAYS)


def get_log_level():
    """Return the current log level."""
    return _log_level


def set_log_level(level):
    """Set the current log level; negative levels are rejected."""
    global _log_level
    level = int(level)
    if level < 0:
        raise ValueError("log level must not be negative")
    _log_level = level


def log_msg(level, fmt, *args):
    """Print a printf-style message to stdout when ``level`` is enabled."""
    if int(level) <= _log_level:
        message = fmt % args if args else fmt
        print(message, file=sys.stdout)