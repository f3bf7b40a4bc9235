"""Tests for the logging_setup module."""

import logging
import os
from io import StringIO
from unittest.mock import patch

from acdump.logging_setup import (
    RESET,
    LogObjects,
    LogStyles,
    ScreenLogFormatter,
    get_logger,
    init_logger,
    is_debug,
    make_style,
    set_debug,
    should_colorize,
)


def test_make_style():
    """Test make_style returns correct prefix and suffix."""
    prefix, suffix = make_style(*LogStyles.WARNING)
    assert prefix == "\x1b[33;2m"
    assert suffix == RESET


def test_make_style_no_codes():
    """Test make_style with no codes returns empty prefix."""
    prefix, suffix = make_style()
    assert prefix == ""
    assert suffix == RESET


def test_should_colorize_respects_no_color():
    """Test that NO_COLOR environment variable disables colors."""
    with patch.dict(os.environ, {"NO_COLOR": "1"}, clear=False):
        assert should_colorize() is False


def test_should_colorize_respects_force_color():
    """Test that FORCE_COLOR environment variable forces colors."""
    with patch.dict(os.environ, {"FORCE_COLOR": "1"}, clear=False):
        os.environ.pop("NO_COLOR", None)
        assert should_colorize(StringIO()) is True


def test_should_colorize_non_tty():
    """Test that non-TTY streams don't get colors."""
    env = {k: v for k, v in os.environ.items() if k not in {"NO_COLOR", "FORCE_COLOR"}}
    with patch.dict(os.environ, env, clear=True):
        assert should_colorize(StringIO()) is False


def _record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord("acdump", level, __file__, 1, message, None, None)


def test_screen_formatter_colors():
    """Test warnings and errors are colored, info is not."""
    set_debug(False)
    try:
        formatter = ScreenLogFormatter(use_colors=True)
        assert formatter.format(_record(logging.INFO, "hello")) == "hello"
        assert formatter.format(_record(logging.ERROR, "oops")) == "\x1b[31;2moops" + RESET
    finally:
        set_debug(True)


def test_screen_formatter_plain():
    """Test no escape sequence is emitted without colors."""
    set_debug(False)
    try:
        formatter = ScreenLogFormatter(use_colors=False)
        assert formatter.format(_record(logging.CRITICAL, "boom")) == "boom"
    finally:
        set_debug(True)


def test_get_logger_levels():
    """Test the level follows the debug state unless given."""
    assert is_debug()
    assert get_logger("acdump.tests.auto").level == logging.DEBUG
    assert get_logger("acdump.tests.fixed", logging.ERROR).level == logging.ERROR
    set_debug(False)
    try:
        assert get_logger("acdump.tests.auto").level == logging.WARNING
    finally:
        set_debug(True)


def test_init_logger_replaces_handlers(tmp_path):
    """Test handlers of a previous initialization are removed from existing loggers."""
    logger = get_logger("acdump.tests.handlers")
    init_logger(str(tmp_path / "first.log"), force_debug=True)
    logger = get_logger("acdump.tests.handlers")
    first_handlers = list(LogObjects.handlers)
    assert len(first_handlers) == 2
    assert all(handler in logger.handlers for handler in first_handlers)

    init_logger("/dev/null", force_debug=True)
    assert not any(handler in logger.handlers for handler in first_handlers)
    logger = get_logger("acdump.tests.handlers")
    assert logger.handlers == LogObjects.handlers
    assert logger.propagate is False


def test_file_logging(tmp_path):
    """Test messages reach the log file."""
    path = tmp_path / "acdump.log"
    init_logger(str(path), force_debug=True)
    try:
        get_logger("acdump.tests.file").warning("written to file")
        for handler in LogObjects.handlers:
            handler.flush()
        assert "[WARNING] acdump.tests.file :: written to file" in path.read_text()
    finally:
        init_logger("/dev/null", force_debug=True)
