"""Configuration validation framework with schema definitions.

Provides declarative schema definitions (ConfigField, ConfigItems) and the
schema of a completion source document. Supports type checking, required
fields, choices, nested mappings, lists of mappings and fuzzy matching for
typo detection.

Used by:
- validate_document() before any script is generated
- the acdump CLI, through ``completions.handlers.dump_script``
"""

from __future__ import annotations

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_args, get_origin

from .config import BOOL_STRINGS, Config
from .constants import CATCH_ALL
from .logging_setup import get_logger

__all__ = [
    "CONFIG_SCHEMA",
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "SchemaViolation",
    "format_config_error",
    "validate_document",
]

ROOT_PATH = "<document>"


@dataclass
class ConfigField:
    """Describes an expected configuration field for validation.

    Attributes:
        name: The configuration key name
        field_type: Expected type (str, int, float, bool, list, dict) or tuple of types for union
        required: Whether the field is required
        choices: List of valid values for enum-like fields
        validator: Custom validator function returning list of error messages
        children: Schema for the keys of a dict value
        items: Schema for the elements of a list value: a type for scalar
               elements, or a ConfigItems when every element is a mapping
    """

    name: str
    field_type: type | tuple[type, ...] = str
    required: bool = False
    choices: list | None = None
    validator: Callable[[Any], list[str]] | None = None
    children: ConfigItems | None = None
    items: ConfigItems | type | None = None

    @property
    def type_name(self) -> str:
        """Return human-readable type name (e.g., 'str', 'list[str]')."""

        def _format_type(typ: type) -> str:
            origin = get_origin(typ)
            if origin is not None:
                args = get_args(typ)
                if args:
                    args_str = ", ".join(_format_type(a) for a in args)
                    return f"{origin.__name__}[{args_str}]"
                return str(origin.__name__)
            return str(typ.__name__)

        if isinstance(self.field_type, tuple):
            return " or ".join(_format_type(typ) for typ in self.field_type)
        return _format_type(self.field_type)


class ConfigItems(list):
    """A list of ConfigField items with cached lookup by name."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)
        self._cache: dict[str, ConfigField] = {}

    def get(self, name: str) -> ConfigField | None:
        """Get a ConfigField by name, with caching for repeated lookups.

        Args:
            name: The field name to look up

        Returns:
            The ConfigField if found, None otherwise
        """
        v = self._cache.get(name)
        if not v:
            for prop in self:
                if prop.name == name:
                    v = prop
                    self._cache[name] = v
                    break
        return v


def format_config_error(field: str, message: str, suggestion: str = "") -> str:
    """Format a configuration error message.

    Args:
        field: Dotted path of the field that has the error
        message: Error description
        suggestion: Optional suggestion for fixing the error

    Returns:
        Formatted error message
    """
    msg = f"Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


@dataclass(frozen=True)
class SchemaViolation:
    """One reason a document was rejected."""

    path: str
    message: str
    suggestion: str = ""

    def __str__(self) -> str:
        return format_config_error(self.path, self.message, self.suggestion)


def _find_similar_key(unknown_key: str, known_keys: list[str]) -> str | None:
    """Find a similar key using fuzzy matching.

    Args:
        unknown_key: The unknown key to find a match for
        known_keys: List of valid keys to search

    Returns:
        The closest matching key, or None if no close match found
    """
    matches = difflib.get_close_matches(unknown_key, known_keys, n=1)
    if matches:
        return matches[0]
    return None


class ConfigValidator:
    """Validates a mapping against a schema."""

    def __init__(self, config: dict, path: str, logger: logging.Logger) -> None:
        """Initialize the validator.

        Args:
            config: The mapping to validate
            path: Location of the mapping in the document, empty for the root
            logger: Logger instance for warnings
        """
        self.config = config
        self.path = path
        self.log = logger

    def field_path(self, name: str) -> str:
        """Return the dotted path of a key of the validated mapping."""
        return f"{self.path}.{name}" if self.path else name

    def validate(self, schema: ConfigItems) -> list[SchemaViolation]:
        """Validate the mapping against schema.

        Args:
            schema: List of ConfigField definitions

        Returns:
            List of violations (empty if validation passed)
        """
        errors: list[SchemaViolation] = []

        for field_def in schema:
            value = self.config.get(field_def.name)
            path = self.field_path(field_def.name)

            # Check required fields
            if field_def.required and value is None:
                errors.append(SchemaViolation(path, "Missing required field", self._get_required_suggestion(field_def)))
                continue

            # Skip optional fields that aren't set
            if value is None:
                continue

            type_errors = self._check_type(field_def, value, path)
            if type_errors:
                errors.extend(type_errors)
                continue

            if field_def.choices is not None and value not in field_def.choices:
                choices_str = ", ".join(repr(c) for c in field_def.choices)
                errors.append(SchemaViolation(path, f"Invalid value {value!r}", f"Valid options: {choices_str}"))

            # custom validation
            if field_def.validator:
                errors.extend(SchemaViolation(path, validation_error) for validation_error in field_def.validator(value))

        return errors

    def _check_type(self, field_def: ConfigField, value: Any, path: str) -> list[SchemaViolation]:  # noqa: ANN401
        """Check if value matches expected type, descending into lists and mappings.

        Args:
            field_def: Field definition
            value: Value to check
            path: Location of the value

        Returns:
            Violations found (empty if the value is well typed)
        """
        expected_type = field_def.field_type

        # Handle union types (tuple of types)
        if isinstance(expected_type, tuple):
            if any(_is_instance(value, single_type) for single_type in expected_type):
                return []
            return [SchemaViolation(path, f"Expected {field_def.type_name}, got {type(value).__name__}")]

        if not _is_instance(value, expected_type):
            return [SchemaViolation(path, f"Expected {field_def.type_name}, got {type(value).__name__}", _TYPE_HINTS.get(expected_type, ""))]

        if expected_type is dict and field_def.children is not None:
            return self._validate_mapping(value, path, field_def.children)
        if expected_type is list and field_def.items is not None:
            return self._validate_list_items(value, path, field_def.items)
        return []

    def _validate_list_items(self, value: list, path: str, items: ConfigItems | type) -> list[SchemaViolation]:
        """Validate every element of a list.

        Args:
            value: The list
            path: Location of the list
            items: Element type, or schema when elements are mappings

        Returns:
            List of all validation errors
        """
        errors: list[SchemaViolation] = []
        for i, element in enumerate(value):
            element_path = f"{path}[{i}]"
            if isinstance(items, ConfigItems):
                if not isinstance(element, dict):
                    errors.append(SchemaViolation(element_path, f"Expected dict, got {type(element).__name__}"))
                    continue
                errors.extend(self._validate_mapping(element, element_path, items))
            elif not _is_instance(element, items):
                errors.append(SchemaViolation(element_path, f"Expected {items.__name__}, got {type(element).__name__}"))
        return errors

    def _validate_mapping(self, value: dict, path: str, schema: ConfigItems) -> list[SchemaViolation]:
        child_validator = ConfigValidator(value, path, self.log)
        errors = child_validator.validate(schema)
        child_validator.warn_unknown_keys(schema)
        return errors

    def _get_required_suggestion(self, field_def: ConfigField) -> str:
        """Generate suggestion for a missing required field.

        Args:
            field_def: Field definition

        Returns:
            Suggestion string
        """
        field_type = field_def.field_type
        # For union types, use the first type for suggestion
        if isinstance(field_type, tuple):
            field_type = field_type[0]

        location = self.path or "the top level"
        if field_type is str:
            return f'Add {field_def.name}: "value" to {location}'
        if field_type is bool:
            return f"Add {field_def.name}: true/false to {location}"
        if field_type is list:
            return f'Add {field_def.name}: ["item"] to {location}'
        return f"Add '{field_def.name}' to {location}"

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Log warnings for unknown configuration keys.

        Args:
            schema: List of ConfigField definitions

        Returns:
            List of warning messages
        """
        warnings = []
        known_keys = {f.name for f in schema}
        location = self.path or ROOT_PATH

        for key in self.config:
            if key in known_keys:
                continue

            # Check for similar keys (typos)
            similar = _find_similar_key(str(key), list(known_keys))
            if similar:
                msg = f"[{location}] Unknown option '{key}' (did you mean '{similar}'?)"
            else:
                msg = f"[{location}] Unknown option '{key}' - will be ignored"

            self.log.warning(msg)
            warnings.append(msg)

        return warnings


def _is_instance(value: Any, expected_type: type) -> bool:  # noqa: ANN401
    """Check a single type, with bool handled apart since it subclasses int."""
    if expected_type is bool:
        return isinstance(value, bool) or (isinstance(value, str) and value.lower() in BOOL_STRINGS)
    if expected_type in (int, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, expected_type)


_TYPE_HINTS: dict[type, str] = {
    bool: "Use true/false (without quotes)",
    list: "Use a list, e.g. [item1, item2]",
    dict: "Use a mapping, e.g. {key: value}",
}


def _not_empty(value: str) -> list[str]:
    return [] if value else ["Must not be empty"]


def _not_empty_list(value: list) -> list[str]:
    return [] if value else ["Must contain at least one element"]


def _no_empty_flags(value: list) -> list[str]:
    return [f"Element {i} must not be empty" for i, flag in enumerate(value) if flag == ""]


def _check_completion_source(value: dict) -> list[str]:
    """A completion source declares exactly one of ``builtin`` and ``cmd``."""
    declared = [key for key in ("builtin", "cmd") if value.get(key) is not None]
    if len(declared) == 1:
        return []
    if declared:
        return ["Declares both 'builtin' and 'cmd', exactly one is allowed"]
    return ["Declares neither 'builtin' nor 'cmd', exactly one is required"]


def _check_arg_index(value: int | str) -> list[str]:
    if value == CATCH_ALL:
        return []
    if isinstance(value, int) and value >= 1:
        return []
    return [f"Expected a positive integer or '{CATCH_ALL}', got {value!r}"]


def _check_unique_indices(value: list) -> list[str]:
    """Reject duplicated positional indices, which would make slots ambiguous."""
    errors: list[str] = []
    seen: dict[Any, int] = {}
    for i, arg in enumerate(value):
        if not isinstance(arg, dict):
            continue
        index = arg.get("index")
        if index is None:
            index = CATCH_ALL
        if not isinstance(index, (int, str)) or isinstance(index, bool):
            continue
        if index in seen:
            errors.append(f"args[{i}] repeats index {index!r} already used by args[{seen[index]}]")
        else:
            seen[index] = i
    return errors


COMP_FIELD = ConfigField(
    "comp",
    dict,
    validator=_check_completion_source,
    children=ConfigItems(
        ConfigField("builtin", str, choices=["files", "directories"]),
        ConfigField("cmd", list, items=str, validator=_not_empty_list),
    ),
)

OPTION_SCHEMA = ConfigItems(
    ConfigField("short", list, items=str, validator=_no_empty_flags),
    ConfigField("description", str),
    ConfigField(
        "value",
        dict,
        children=ConfigItems(
            ConfigField("name", str),
            COMP_FIELD,
        ),
    ),
)

ARG_SCHEMA = ConfigItems(
    ConfigField("index", (int, str), validator=_check_arg_index),
    ConfigField("name", str),
    COMP_FIELD,
    ConfigField(
        "skip_if",
        dict,
        children=ConfigItems(
            ConfigField("has_opt_any", list, items=str, validator=_no_empty_flags),
        ),
    ),
)

CONFIG_SCHEMA = ConfigItems(
    ConfigField("name", str, required=True, validator=_not_empty),
    ConfigField("use_doubledash", bool),
    ConfigField("short_opt_prefix", str, validator=_not_empty),
    ConfigField("opts", list, items=OPTION_SCHEMA),
    ConfigField("args", list, items=ARG_SCHEMA, validator=_check_unique_indices),
)


def _warn_undeclared_flags(config: Config, log: logging.Logger) -> None:
    declared = set(config.flags)
    for i, arg in enumerate(config.args):
        if arg.skip_if is None:
            continue
        for flag in arg.skip_if.has_opt_any:
            if flag not in declared:
                log.warning("[args[%d].skip_if] Flag '%s' is not declared in opts - it will never match", i, flag)


def validate_document(raw: Any, logger: logging.Logger | None = None) -> Config | list[SchemaViolation]:  # noqa: ANN401
    """Check a parsed source document and build its model.

    Every violation is collected before returning; unknown keys only produce
    warnings.

    Args:
        raw: The parsed document
        logger: Logger for warnings (defaults to the "validate" logger)

    Returns:
        The Config on success, otherwise the list of violations
    """
    log = logger or get_logger("validate")
    if not isinstance(raw, dict):
        return [SchemaViolation(ROOT_PATH, f"Expected a mapping at the top level, got {type(raw).__name__}")]

    validator = ConfigValidator(raw, "", log)
    violations = validator.validate(CONFIG_SCHEMA)
    validator.warn_unknown_keys(CONFIG_SCHEMA)
    if violations:
        for violation in violations:
            log.debug("%s", violation)
        return violations

    config = Config.from_dict(raw)
    _warn_undeclared_flags(config, log)
    return config
