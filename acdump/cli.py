"""Command line entry point of acdump."""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING, NoReturn

from .completions import dump_file
from .constants import DEFAULT_SHELL, SUPPORTED_SHELLS, TOOL_NAME
from .logging_setup import LogStyles, get_logger, init_logger, make_style, should_colorize
from .models import AcdumpError, ExitCode

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["USAGE", "main"]

USAGE = f"""\
usage: {TOOL_NAME} [option(s)] <source-file>
dump an autocompleter for shells.

options:
  -o, --output=OUTPUT   output file (default: standard output)
  -s, --shell=SHELL     target shell (default: {DEFAULT_SHELL}, supported: {", ".join(SUPPORTED_SHELLS)})
      --debug           print debug logs
      --help            print usage"""


def _fail(message: str, code: ExitCode) -> NoReturn:
    """Print a one line error message and exit."""
    prefix, suffix = make_style(*LogStyles.CRITICAL) if should_colorize(sys.stderr) else ("", "")
    print(f"{prefix}{TOOL_NAME}: {message}{suffix}", file=sys.stderr)
    sys.exit(code)


def _usage_error(message: str) -> NoReturn:
    print(f"{TOOL_NAME}: {message}", file=sys.stderr)
    print(f"Try '{TOOL_NAME} --help' for more information.", file=sys.stderr)
    sys.exit(ExitCode.USAGE_ERROR)


class _ArgumentParser(argparse.ArgumentParser):
    """Parser reporting errors with the acdump wording and exit code."""

    def error(self, message: str) -> NoReturn:
        _usage_error(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=TOOL_NAME, usage=USAGE, add_help=False, allow_abbrev=False)
    parser.add_argument("-o", "--output", default="")
    parser.add_argument("-s", "--shell", default=str(DEFAULT_SHELL))
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--help", action="store_true")
    parser.add_argument("source", nargs="?")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Run the acdump command.

    Args:
        argv: Command line arguments, without the program name (defaults to sys.argv[1:])
    """
    options, extras = _build_parser().parse_known_args(argv)
    unknown = next((arg for arg in extras if arg.startswith("-")), None)
    if unknown is not None:
        _usage_error(f"unrecognized option: '{unknown}'")

    if options.help:
        print(USAGE)
        sys.exit(ExitCode.SUCCESS)

    init_logger(force_debug=options.debug)
    log = get_logger()

    if options.shell not in SUPPORTED_SHELLS:
        _fail(f"'{options.shell}' is not supported yet", ExitCode.USAGE_ERROR)
    if options.source is None:
        _fail("no input source-file", ExitCode.USAGE_ERROR)
    if extras:
        log.warning("Ignoring extra arguments: %s", " ".join(extras))

    try:
        script = dump_file(options.source, options.shell, options.output or None, log)
    except AcdumpError as e:
        _fail(f"{type(e).__name__}: {e}", e.exit_code)

    if not options.output:
        print(script)
    sys.exit(ExitCode.SUCCESS)
