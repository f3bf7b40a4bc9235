"""Shared constants for acdump."""

from .models import Shell

__all__ = [
    "CATCH_ALL",
    "DEFAULT_SHELL",
    "DEFAULT_SHORT_OPT_PREFIX",
    "DOUBLEDASH",
    "SUPPORTED_SHELLS",
    "TOML_SUFFIXES",
    "JSON_SUFFIXES",
    "TOOL_NAME",
]

TOOL_NAME = "acdump"

# Supported shells for completion generation
SUPPORTED_SHELLS = tuple(shell.value for shell in Shell)
DEFAULT_SHELL = Shell.BASH

# Positional index standing for "every remaining token"
CATCH_ALL = "all"

DEFAULT_SHORT_OPT_PREFIX = "-"
DOUBLEDASH = "--"

# Source document formats, anything else is read as YAML
TOML_SUFFIXES = frozenset({".toml"})
JSON_SUFFIXES = frozenset({".json"})
