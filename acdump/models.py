"""Error types, exit codes and the shell enumeration."""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .validation import SchemaViolation

__all__ = [
    "AcdumpError",
    "DocumentIOError",
    "ExitCode",
    "MalformedDocumentError",
    "SchemaViolationError",
    "Shell",
    "UnsupportedShellError",
]


class Shell(StrEnum):
    """Shells a completion script can be generated for."""

    BASH = "bash"


class ExitCode(IntEnum):
    """Exit codes for the acdump command."""

    SUCCESS = 0
    USAGE_ERROR = 1  # Unknown option, missing source file, unsupported shell
    CONFIG_ERROR = 2  # Source document unparsable or rejected by the schema
    IO_ERROR = 3  # Source unreadable or destination unwritable


class AcdumpError(Exception):
    """Base class for every fatal error of a dump run."""

    exit_code = ExitCode.USAGE_ERROR


class UnsupportedShellError(AcdumpError):
    """The requested shell has no generator back end."""

    def __init__(self, shell: str) -> None:
        super().__init__(f"'{shell}' is not supported yet")
        self.shell = shell


class SchemaViolationError(AcdumpError):
    """The source document does not match the configuration schema."""

    exit_code = ExitCode.CONFIG_ERROR

    def __init__(self, violations: Sequence[SchemaViolation]) -> None:
        self.violations = list(violations)
        super().__init__("cannot accept source: " + "; ".join(str(v) for v in self.violations))


class MalformedDocumentError(AcdumpError):
    """The source text is not valid YAML, JSON or TOML."""

    exit_code = ExitCode.CONFIG_ERROR


class DocumentIOError(AcdumpError):
    """Reading the source or writing the destination failed."""

    exit_code = ExitCode.IO_ERROR
