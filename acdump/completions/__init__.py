"""Shell completion script compilation.

This package provides:
- The typed plan compiled from a Config (flags, positional slots)
- Shell-specific completion script generators (bash)
- The dump entry points used by the `acdump` command
"""

from __future__ import annotations

from .generators import GENERATORS, ShellBackend
from .handlers import dump_file, dump_script, resolve_shell
from .models import CompletionPlan, FlagEntry, PositionalSlot

__all__ = [
    "GENERATORS",
    "CompletionPlan",
    "FlagEntry",
    "PositionalSlot",
    "ShellBackend",
    "dump_file",
    "dump_script",
    "resolve_shell",
]
