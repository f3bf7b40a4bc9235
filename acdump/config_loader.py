"""Source document loading utilities.

This module handles reading and parsing YAML/JSON/TOML source documents.
The format is picked from the file suffix; anything that is neither ``.toml``
nor ``.json`` is read as YAML, which also accepts JSON.
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from .constants import JSON_SUFFIXES, TOML_SUFFIXES
from .models import DocumentIOError, MalformedDocumentError

if TYPE_CHECKING:
    import logging

__all__ = ["DocumentLoader"]


class DocumentLoader:
    """Loads the source document describing a command line."""

    def __init__(self, log: logging.Logger) -> None:
        """Initialize the loader.

        Args:
            log: Logger instance for status messages
        """
        self.log = log

    def load(self, source: str | Path) -> Any:  # noqa: ANN401
        """Load and parse a source document.

        Args:
            source: Path to the document; ``~`` and environment variables are expanded

        Returns:
            The parsed document (usually a dict, validated later)

        Raises:
            DocumentIOError: If the file can not be read
            MalformedDocumentError: If the content is not valid for its format
        """
        fname = Path(os.path.expandvars(str(source))).expanduser()
        self.log.info("Loading %s", fname)
        try:
            raw = fname.read_bytes()
        except OSError as e:
            raise DocumentIOError(f"cannot read {fname}: {e.strerror or e}") from e
        return self._parse(fname, raw)

    def _parse(self, fname: Path, raw: bytes) -> Any:  # noqa: ANN401
        """Parse raw bytes according to the file suffix.

        Args:
            fname: Path of the document, used for the format and messages
            raw: File content

        Returns:
            The parsed document
        """
        suffix = fname.suffix.lower()
        try:
            if suffix in TOML_SUFFIXES:
                self.log.debug("Parsing %s as TOML", fname)
                return tomllib.loads(raw.decode("utf-8"))
            if suffix in JSON_SUFFIXES:
                self.log.debug("Parsing %s as JSON", fname)
                return json.loads(raw)
            self.log.debug("Parsing %s as YAML", fname)
            return yaml.safe_load(raw)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
            reason = " ".join(str(e).split())
            raise MalformedDocumentError(f"cannot parse {fname}: {reason}") from e
