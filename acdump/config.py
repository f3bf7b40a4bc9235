"""In-memory model of a completion source document.

The model is built once from a validated document (see ``validation``) and
never mutated afterwards: every record is a frozen dataclass holding tuples.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

from .constants import CATCH_ALL, DEFAULT_SHORT_OPT_PREFIX

__all__ = [
    "BOOL_FALSE_STRINGS",
    "BOOL_STRINGS",
    "BOOL_TRUE_STRINGS",
    "ArgIndex",
    "ArgSpec",
    "Builtin",
    "BuiltinKind",
    "Command",
    "CompletionSource",
    "Config",
    "OptionSpec",
    "SkipIf",
    "ValueSpec",
    "coerce_to_bool",
    "parse_completion_source",
]

# Boolean string constants (shared with validation module)
BOOL_TRUE_STRINGS = frozenset({"true", "yes", "on", "1", "enabled"})
BOOL_FALSE_STRINGS = frozenset({"false", "no", "off", "0", "disabled"})
BOOL_STRINGS = BOOL_TRUE_STRINGS | BOOL_FALSE_STRINGS

ArgIndex = int | Literal["all"]


def coerce_to_bool(value: Any, default: bool = False) -> bool:  # noqa: ANN401
    """Coerce a value to boolean, handling loose typing.

    Args:
        value: The value to coerce
        default: Default value if value is None

    Returns:
        The boolean value

    Behavior:
        - None → default
        - Empty string → False
        - Explicit falsy strings ("false", "no", "off", "0", "disabled") → False
        - Any other non-empty string → True
        - Non-string values → bool(value)
    """
    if value is None:
        return default
    if isinstance(value, str):
        if not value.strip():
            return False
        return value.lower().strip() not in BOOL_FALSE_STRINGS
    return bool(value)


class BuiltinKind(StrEnum):
    """Filesystem completions provided by the shell itself."""

    FILES = "files"
    DIRECTORIES = "directories"


@dataclass(frozen=True)
class Builtin:
    """Complete with filesystem entries."""

    kind: BuiltinKind


@dataclass(frozen=True)
class Command:
    """Complete with the output lines of an external command."""

    argv: tuple[str, ...]


CompletionSource = Builtin | Command


@dataclass(frozen=True)
class ValueSpec:
    """The value taken by an option."""

    name: str = ""
    comp: CompletionSource | None = None


@dataclass(frozen=True)
class OptionSpec:
    """A flag (possibly with several spellings) and its optional value."""

    short: tuple[str, ...] = ()
    description: str = ""
    value: ValueSpec | None = None

    @property
    def takes_value(self) -> bool:
        """Return True if the flag consumes the following token."""
        return self.value is not None


@dataclass(frozen=True)
class SkipIf:
    """Conditions lifting the requirement of a positional slot."""

    has_opt_any: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArgSpec:
    """A positional argument slot."""

    index: ArgIndex
    name: str = ""
    comp: CompletionSource | None = None
    skip_if: SkipIf | None = None

    @property
    def is_catch_all(self) -> bool:
        """Return True for the slot absorbing every remaining token."""
        return self.index == CATCH_ALL


@dataclass(frozen=True)
class Config:
    """A validated completion source document."""

    name: str
    use_doubledash: bool = False
    short_opt_prefix: str = DEFAULT_SHORT_OPT_PREFIX
    opts: tuple[OptionSpec, ...] = ()
    args: tuple[ArgSpec, ...] = ()

    @property
    def flags(self) -> tuple[str, ...]:
        """Every declared flag literal, in declaration order."""
        return tuple(short for opt in self.opts for short in opt.short)

    @property
    def has_flags(self) -> bool:
        """Return True if at least one flag literal is declared."""
        return any(opt.short for opt in self.opts)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a Config from a document that already passed validation.

        Args:
            data: The raw document

        Returns:
            The immutable model
        """
        return cls(
            name=data["name"],
            use_doubledash=coerce_to_bool(data.get("use_doubledash"), default=False),
            short_opt_prefix=data.get("short_opt_prefix") or DEFAULT_SHORT_OPT_PREFIX,
            opts=tuple(_parse_option(opt) for opt in data.get("opts") or ()),
            args=tuple(_parse_arg(arg) for arg in data.get("args") or ()),
        )


def parse_completion_source(data: dict[str, Any]) -> CompletionSource:
    """Turn a validated ``comp`` mapping into its tagged variant.

    Args:
        data: Either ``{"builtin": ...}`` or ``{"cmd": [...]}``

    Returns:
        The matching CompletionSource
    """
    if data.get("builtin") is not None:
        return Builtin(BuiltinKind(data["builtin"]))
    return Command(tuple(data["cmd"]))


def _parse_option(data: dict[str, Any]) -> OptionSpec:
    value = data.get("value")
    return OptionSpec(
        short=tuple(data.get("short") or ()),
        description=data.get("description") or "",
        value=_parse_value(value) if value is not None else None,
    )


def _parse_value(data: dict[str, Any]) -> ValueSpec:
    comp = data.get("comp")
    return ValueSpec(
        name=data.get("name") or "",
        comp=parse_completion_source(comp) if comp is not None else None,
    )


def _parse_arg(data: dict[str, Any]) -> ArgSpec:
    comp = data.get("comp")
    skip_if = data.get("skip_if")
    return ArgSpec(
        index=CATCH_ALL if data.get("index") is None else data["index"],
        name=data.get("name") or "",
        comp=parse_completion_source(comp) if comp is not None else None,
        skip_if=SkipIf(tuple(skip_if.get("has_opt_any") or ())) if skip_if is not None else None,
    )
