"""Typed plan compiled from a Config before any script text is emitted.

Runtime state in the generated scripts is keyed by the identifiers held here:
flags by their literal, positional slots by their declaration ordinal. Keys are
never assembled from index and name strings, so two declarations can not
collide.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import ArgSpec, Config, OptionSpec

__all__ = [
    "CompletionPlan",
    "FlagEntry",
    "PositionalSlot",
]


@dataclass(frozen=True)
class FlagEntry:
    """A flag literal and the option declaring it."""

    literal: str
    option: OptionSpec

    @property
    def takes_value(self) -> bool:
        """Return True if the flag consumes the following token."""
        return self.option.takes_value


@dataclass(frozen=True)
class PositionalSlot:
    """A positional argument slot."""

    ordinal: int  # declaration order, the runtime key
    spec: ArgSpec

    @property
    def label(self) -> str:
        """Human readable description, used in script comments."""
        where = "remaining arguments" if self.spec.is_catch_all else f"argument {self.spec.index}"
        return f"{where} ({self.spec.name})" if self.spec.name else where


@dataclass(frozen=True)
class CompletionPlan:
    """Everything a generator back end needs, resolved from a Config."""

    config: Config
    flags: tuple[FlagEntry, ...]
    slots: tuple[PositionalSlot, ...]
    explicit_order: tuple[PositionalSlot, ...]
    catch_all: PositionalSlot | None

    @classmethod
    def from_config(cls, config: Config) -> CompletionPlan:
        """Resolve flags and slots of a Config.

        The first declaration of a flag literal wins over later ones. Explicit
        slots are ordered by index, and only the first declared slot of an
        index is kept; the first declared catch-all is the one used.

        Args:
            config: The validated configuration

        Returns:
            The plan
        """
        flags: dict[str, FlagEntry] = {}
        for opt in config.opts:
            for short in opt.short:
                flags.setdefault(short, FlagEntry(short, opt))

        slots = tuple(PositionalSlot(ordinal, arg) for ordinal, arg in enumerate(config.args))
        by_index: dict[int, PositionalSlot] = {}
        for slot in slots:
            if not slot.spec.is_catch_all:
                by_index.setdefault(slot.spec.index, slot)
        explicit = sorted(by_index.values(), key=lambda slot: slot.spec.index)
        catch_all = next((slot for slot in slots if slot.spec.is_catch_all), None)
        return cls(
            config=config,
            flags=tuple(flags.values()),
            slots=slots,
            explicit_order=tuple(explicit),
            catch_all=catch_all,
        )

    @property
    def has_flags(self) -> bool:
        """Return True if at least one flag literal is declared."""
        return bool(self.flags)

    def flags_for(self, option: OptionSpec) -> list[FlagEntry]:
        """Flag entries resolved to a given option, in declaration order."""
        return [entry for entry in self.flags if entry.option is option]
