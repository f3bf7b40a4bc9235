"""Logging setup and utilities.

Screen output is colored per level when the stream is a terminal, honouring
``NO_COLOR`` and ``FORCE_COLOR``. Debug mode comes from the ``DEBUG``
environment variable or ``--debug`` on the command line.
"""

import logging
import os
import sys
from typing import TextIO

__all__ = [
    "LogObjects",
    "LogStyles",
    "get_logger",
    "init_logger",
    "is_debug",
    "make_style",
    "set_debug",
    "should_colorize",
]

_ESC = "\x1b["
RESET = f"{_ESC}0m"

BOLD = "1"
DIM = "2"
RED = "31"
YELLOW = "33"


class LogStyles:
    """Pre-built styles for log levels."""

    WARNING = (YELLOW, DIM)
    ERROR = (RED, DIM)
    CRITICAL = (RED, BOLD)


class _DebugState:
    """Container for mutable debug state to avoid global statement."""

    value: bool = bool(os.environ.get("DEBUG"))


_debug_state = _DebugState()


def is_debug() -> bool:
    """Return the current debug state."""
    return _debug_state.value


def set_debug(value: bool) -> None:
    """Set the debug state."""
    _debug_state.value = value


def should_colorize(stream: TextIO | None = None) -> bool:
    """Determine if ANSI colors should be used for the given stream.

    Args:
        stream: The output stream to check. Defaults to sys.stderr.

    Returns:
        True if colors should be used, False otherwise.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def make_style(*codes: str) -> tuple[str, str]:
    """Create a style prefix and suffix pair.

    Args:
        *codes: ANSI codes to apply.

    Returns:
        Tuple of (prefix, suffix) strings for use in formatters.
    """
    if not codes:
        return ("", RESET)
    return (f"{_ESC}{';'.join(codes)}m", RESET)


class LogObjects:
    """Reusable objects for loggers."""

    handlers: list[logging.Handler] = []


class ScreenLogFormatter(logging.Formatter):
    """A formatter adding colors based on log level."""

    def __init__(self, use_colors: bool) -> None:
        super().__init__()
        log_format = r"%(name)18s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"%(message)s"
        styles = {
            logging.WARNING: LogStyles.WARNING,
            logging.ERROR: LogStyles.ERROR,
            logging.CRITICAL: LogStyles.CRITICAL,
        }
        self._formatters: dict[int, logging.Formatter] = {}
        for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL):
            prefix, suffix = make_style(*styles[level]) if use_colors and level in styles else ("", "")
            self._formatters[level] = logging.Formatter(prefix + log_format + suffix)

    def format(self, record: logging.LogRecord) -> str:
        return self._formatters.get(record.levelno, self._formatters[logging.INFO]).format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Initialize the logging system.

    Safe to call more than once: handlers from a previous call are replaced.

    Args:
        filename: Optional filename to log to
        force_debug: If True, force debug level
    """
    if force_debug:
        set_debug(True)

    known_loggers = [lg for lg in list(logging.root.manager.loggerDict.values()) if isinstance(lg, logging.Logger)]
    for handler in LogObjects.handlers:
        for logger in known_loggers:
            logger.removeHandler(handler)
        handler.close()
    LogObjects.handlers.clear()

    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter(should_colorize(stream_handler.stream)))
    LogObjects.handlers.append(stream_handler)


def get_logger(name: str = "acdump", level: int | None = None) -> logging.Logger:
    """Return a named logger.

    Args:
        name (str): logger's name
        level (int): logger's level (auto if not set)

    Returns:
        The logger instance
    """
    logger = logging.getLogger(name)
    if level is None:
        logger.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    else:
        logger.setLevel(level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.debug('Logger "%s" initialized', name)
    return logger
