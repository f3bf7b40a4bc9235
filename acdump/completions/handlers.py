"""Dump entry points for completion scripts.

Provides the functions used by the `acdump` command to turn a source
document into a completion script, and to write it out.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..config_loader import DocumentLoader
from ..constants import SUPPORTED_SHELLS
from ..logging_setup import get_logger
from ..models import DocumentIOError, SchemaViolationError, Shell, UnsupportedShellError
from ..validation import validate_document
from .generators import GENERATORS

if TYPE_CHECKING:
    import logging

__all__ = ["dump_file", "dump_script", "resolve_shell"]


def resolve_shell(name: str | Shell) -> Shell:
    """Map a shell name to its enumeration member.

    Args:
        name: Shell name as given on the command line

    Returns:
        The Shell

    Raises:
        UnsupportedShellError: If no back end exists for the shell
    """
    if name not in SUPPORTED_SHELLS:
        raise UnsupportedShellError(str(name))
    return Shell(name)


def dump_script(document: Any, shell: str | Shell, log: logging.Logger | None = None) -> str:  # noqa: ANN401
    """Compile a parsed source document into a completion script.

    The shell is checked before the document, and nothing is produced unless
    the document is fully valid.

    Args:
        document: The parsed source document
        shell: Target shell name
        log: Logger instance (defaults to the "dump" logger)

    Returns:
        The completion function followed by its registration line

    Raises:
        UnsupportedShellError: If the shell is not supported
        SchemaViolationError: If the document does not match the schema
    """
    log = log or get_logger("dump")
    target = resolve_shell(shell)

    result = validate_document(document, log)
    if isinstance(result, list):
        raise SchemaViolationError(result)

    backend = GENERATORS[target]
    log.debug(
        "Generating %s completion for %s (%d flag(s), %d positional slot(s))",
        target,
        result.name,
        len(result.flags),
        len(result.args),
    )
    return backend.generate(result) + "\n" + backend.register(result)


def dump_file(source: str | Path, shell: str | Shell, output: str | Path | None = None, log: logging.Logger | None = None) -> str:
    """Load a source document, compile it and optionally write the script.

    Args:
        source: Path of the source document
        shell: Target shell name
        output: Destination file; when None the script is only returned
        log: Logger instance (defaults to the "dump" logger)

    Returns:
        The generated script

    Raises:
        DocumentIOError: If the source can not be read or the output written
        MalformedDocumentError: If the source can not be parsed
        UnsupportedShellError: If the shell is not supported
        SchemaViolationError: If the document does not match the schema
    """
    log = log or get_logger("dump")
    resolve_shell(shell)
    document = DocumentLoader(log).load(source)
    script = dump_script(document, shell, log)

    if output is not None:
        output_path = Path(output).expanduser()
        log.debug("Writing completions to: %s", output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(script + "\n", encoding="utf-8")
        except OSError as e:
            raise DocumentIOError(f"cannot write {output_path}: {e.strerror or e}") from e
        log.info("Completions written to %s", output_path)

    return script
