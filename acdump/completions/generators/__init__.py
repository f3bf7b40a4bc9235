"""Shell completion generators.

Provides a generator back end for each supported shell.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

from ...config import Config
from ...models import Shell
from .bash import generate_bash, register_bash

__all__ = ["GENERATORS", "ShellBackend", "generate_bash", "register_bash"]


class ShellBackend(NamedTuple):
    """Script generation entry points of one shell."""

    generate: Callable[[Config], str]
    register: Callable[[Config], str]


GENERATORS: dict[Shell, ShellBackend] = {
    Shell.BASH: ShellBackend(generate_bash, register_bash),
}
