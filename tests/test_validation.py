"""Tests for source document validation."""

from __future__ import annotations

from dataclasses import fields

import pytest

from acdump.config import Builtin, BuiltinKind, Command, Config
from acdump.validation import (
    CONFIG_SCHEMA,
    ConfigField,
    ConfigItems,
    ConfigValidator,
    SchemaViolation,
    _find_similar_key,
    format_config_error,
    validate_document,
)

VALID_DOCUMENT = {
    "name": "tool",
    "use_doubledash": True,
    "opts": [
        {"short": ["-v", "--verbose"], "description": "talk more"},
        {"short": ["-o"], "value": {"name": "file", "comp": {"builtin": "files"}}},
    ],
    "args": [
        {"index": 1, "name": "target", "comp": {"cmd": ["ls"]}, "skip_if": {"has_opt_any": ["-v"]}},
        {"name": "rest", "comp": {"builtin": "directories"}},
    ],
}


def _messages(violations: list[SchemaViolation]) -> list[str]:
    return [str(v) for v in violations]


def _paths(violations: list[SchemaViolation]) -> list[str]:
    return [v.path for v in violations]


# ConfigField / ConfigItems


def test_config_field_defaults():
    """Test ConfigField default values."""
    field = ConfigField("test")
    assert field.field_type is str
    assert field.required is False
    assert field.choices is None
    assert field.validator is None
    assert field.children is None
    assert field.items is None


def test_config_field_attributes():
    """Test a field only carries what the validator checks."""
    assert [f.name for f in fields(ConfigField)] == ["name", "field_type", "required", "choices", "validator", "children", "items"]


def test_config_field_type_name():
    """Test type_name for simple and union types."""
    assert ConfigField("a", int).type_name == "int"
    assert ConfigField("a", (int, str)).type_name == "int or str"
    assert ConfigField("a", list[str]).type_name == "list[str]"


def test_config_items_get():
    """Test ConfigItems lookup by name."""
    items = ConfigItems(ConfigField("a"), ConfigField("b", int))
    assert items.get("b").field_type is int
    assert items.get("b") is items.get("b")
    assert items.get("missing") is None


def test_format_config_error():
    """Test error formatting with and without suggestion."""
    assert format_config_error("opts[0].short", "Expected list, got str") == "Config error for 'opts[0].short': Expected list, got str"
    assert format_config_error("name", "Missing", "Add it") == "Config error for 'name': Missing -> Add it"


def test_find_similar_key():
    """Test fuzzy matching of unknown keys."""
    assert _find_similar_key("nmae", ["name", "opts", "args"]) == "name"
    assert _find_similar_key("use_double_dash", ["use_doubledash", "opts"]) == "use_doubledash"
    assert _find_similar_key("zzz", ["name", "opts"]) is None


# ConfigValidator


def test_validator_required_field(test_logger):
    """Test a missing required field is reported with a suggestion."""
    schema = ConfigItems(ConfigField("name", str, required=True))
    errors = ConfigValidator({}, "", test_logger).validate(schema)
    assert len(errors) == 1
    assert errors[0].path == "name"
    assert "Missing required field" in errors[0].message
    assert 'Add name: "value" to the top level' in errors[0].suggestion


def test_validator_type_error(test_logger):
    """Test type mismatches, with bool not accepted as int."""
    schema = ConfigItems(ConfigField("count", int), ConfigField("items", list))
    errors = ConfigValidator({"count": True, "items": "a"}, "", test_logger).validate(schema)
    assert _messages(errors) == [
        "Config error for 'count': Expected int, got bool",
        "Config error for 'items': Expected list, got str -> Use a list, e.g. [item1, item2]",
    ]


def test_validator_bool_strings(test_logger):
    """Test loose boolean strings are accepted."""
    schema = ConfigItems(ConfigField("flag", bool))
    assert ConfigValidator({"flag": "yes"}, "", test_logger).validate(schema) == []
    errors = ConfigValidator({"flag": "maybe"}, "", test_logger).validate(schema)
    assert len(errors) == 1


def test_validator_choices(test_logger):
    """Test values outside of the choices are rejected."""
    schema = ConfigItems(ConfigField("mode", str, choices=["a", "b"]))
    errors = ConfigValidator({"mode": "c"}, "", test_logger).validate(schema)
    assert len(errors) == 1
    assert errors[0].message == "Invalid value 'c'"
    assert errors[0].suggestion == "Valid options: 'a', 'b'"


def test_validator_nested_paths(test_logger):
    """Test violations inside lists of mappings carry their full path."""
    schema = ConfigItems(ConfigField("things", list, items=ConfigItems(ConfigField("size", int, required=True))))
    errors = ConfigValidator({"things": [{"size": 1}, {}, "x"]}, "", test_logger).validate(schema)
    assert _paths(errors) == ["things[1].size", "things[2]"]


def test_warn_unknown_keys(test_logger):
    """Test unknown keys produce warnings, with a suggestion when close to a known key."""
    schema = ConfigItems(ConfigField("name"), ConfigField("opts", list))
    validator = ConfigValidator({"name": "x", "otps": [], "unrelated": 1}, "", test_logger)
    warnings = validator.warn_unknown_keys(schema)
    assert warnings == [
        "[<document>] Unknown option 'otps' (did you mean 'opts'?)",
        "[<document>] Unknown option 'unrelated' - will be ignored",
    ]
    assert test_logger.handlers[0].messages == warnings


# Documents


def test_valid_document():
    """Test a valid document gives its model."""
    config = validate_document(VALID_DOCUMENT)
    assert isinstance(config, Config)
    assert config.name == "tool"
    assert config.use_doubledash is True
    assert config.opts[1].value.comp == Builtin(BuiltinKind.FILES)
    assert config.args[0].comp == Command(("ls",))
    assert config.args[1].index == "all"


def test_minimal_document():
    """Test only the name is required."""
    config = validate_document({"name": "tool"})
    assert config == Config(name="tool")


@pytest.mark.parametrize("raw", [None, [], "name: tool", 42])
def test_document_not_a_mapping(raw):
    """Test a document whose root is not a mapping."""
    errors = validate_document(raw)
    assert len(errors) == 1
    assert errors[0].path == "<document>"
    assert "Expected a mapping at the top level" in errors[0].message


@pytest.mark.parametrize(
    ("document", "path", "message"),
    [
        ({}, "name", "Missing required field"),
        ({"name": ""}, "name", "Must not be empty"),
        ({"name": 3}, "name", "Expected str, got int"),
        ({"name": "t", "use_doubledash": "maybe"}, "use_doubledash", "Expected bool, got str"),
        ({"name": "t", "short_opt_prefix": ""}, "short_opt_prefix", "Must not be empty"),
        ({"name": "t", "opts": {"short": ["-a"]}}, "opts", "Expected list, got dict"),
        ({"name": "t", "opts": [{"short": "-a"}]}, "opts[0].short", "Expected list, got str"),
        ({"name": "t", "opts": [{"short": ["-a", 1]}]}, "opts[0].short[1]", "Expected str, got int"),
        ({"name": "t", "opts": [{"short": ["-a", ""]}]}, "opts[0].short", "Element 1 must not be empty"),
        ({"name": "t", "opts": [{"short": ["-a"], "value": {"comp": {}}}]}, "opts[0].value.comp", "Declares neither"),
        ({"name": "t", "args": [{"comp": {"builtin": "files", "cmd": ["ls"]}}]}, "args[0].comp", "Declares both"),
        ({"name": "t", "args": [{"comp": {"builtin": "sockets"}}]}, "args[0].comp.builtin", "Invalid value 'sockets'"),
        ({"name": "t", "args": [{"comp": {"cmd": "ls -l"}}]}, "args[0].comp.cmd", "Expected list, got str"),
        ({"name": "t", "args": [{"comp": {"cmd": []}}]}, "args[0].comp.cmd", "Must contain at least one element"),
        ({"name": "t", "args": [{"comp": {"cmd": ["ls", 2]}}]}, "args[0].comp.cmd[1]", "Expected str, got int"),
        ({"name": "t", "args": [{"index": 0}]}, "args[0].index", "Expected a positive integer or 'all', got 0"),
        ({"name": "t", "args": [{"index": "3"}]}, "args[0].index", "Expected a positive integer or 'all', got '3'"),
        ({"name": "t", "args": [{"index": True}]}, "args[0].index", "Expected int or str, got bool"),
        ({"name": "t", "args": [{"index": 1.5}]}, "args[0].index", "Expected a positive integer or 'all', got 1.5"),
        ({"name": "t", "args": [{"skip_if": {"has_opt_any": "-a"}}]}, "args[0].skip_if.has_opt_any", "Expected list, got str"),
    ],
)
def test_document_violation(document, path, message):
    """Test each kind of violation is reported at its location."""
    errors = validate_document(document)
    assert isinstance(errors, list)
    assert path in _paths(errors)
    assert any(message in e.message for e in errors if e.path == path)


def test_duplicate_explicit_index():
    """Test two slots with the same index are rejected."""
    errors = validate_document({"name": "t", "args": [{"index": 1}, {"index": 2}, {"index": 1}]})
    assert _messages(errors) == ["Config error for 'args': args[2] repeats index 1 already used by args[0]"]


def test_duplicate_catch_all():
    """Test two catch-all slots are rejected, the index being implicit or not."""
    errors = validate_document({"name": "t", "args": [{"name": "a"}, {"index": "all", "name": "b"}]})
    assert _messages(errors) == ["Config error for 'args': args[1] repeats index 'all' already used by args[0]"]


def test_violations_are_aggregated():
    """Test every violation is reported, not just the first one."""
    document = {
        "name": "",
        "opts": [{"short": [1]}],
        "args": [{"index": -1}, {"comp": {}}],
    }
    errors = validate_document(document)
    assert _paths(errors) == ["name", "opts[0].short[0]", "args[0].index", "args[1].comp"]


def test_null_values_are_unset():
    """Test keys set to null are treated as absent."""
    config = validate_document({"name": "t", "opts": [{"short": ["-a"], "value": None, "description": None}], "args": [{"index": None}]})
    assert isinstance(config, Config)
    assert config.opts[0].takes_value is False
    assert config.args[0].is_catch_all


def test_unknown_keys_are_warnings(test_logger):
    """Test unknown keys do not reject the document."""
    config = validate_document({"name": "t", "opst": [], "args": [{"indx": 1}]}, test_logger)
    assert isinstance(config, Config)
    assert test_logger.handlers[0].messages == [
        "[args[0]] Unknown option 'indx' (did you mean 'index'?)",
        "[<document>] Unknown option 'opst' (did you mean 'opts'?)",
    ]


def test_undeclared_skip_if_flag(test_logger):
    """Test a skip_if flag missing from opts is only a warning."""
    config = validate_document(
        {"name": "t", "opts": [{"short": ["-a"]}], "args": [{"index": 1, "skip_if": {"has_opt_any": ["-a", "-z"]}}]},
        test_logger,
    )
    assert isinstance(config, Config)
    assert test_logger.handlers[0].messages == ["[args[0].skip_if] Flag '-z' is not declared in opts - it will never match"]


def test_schema_keys():
    """Test the top level keys of a document."""
    assert [f.name for f in CONFIG_SCHEMA] == ["name", "use_doubledash", "short_opt_prefix", "opts", "args"]
