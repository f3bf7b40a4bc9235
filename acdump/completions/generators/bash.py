r"""Bash completion script generator.

Compiles a Config into one completion function. At every <TAB> the function:

1. scans the tokens before the cursor for flags, stopping at the first
   positional token (or at ``--`` when enabled) and skipping flag values,
2. lifts the requirement of slots whose ``skip_if`` flags were seen,
3. hands each token after the scan boundary to the next required explicit
   slot, then to the catch-all,
4. picks a mode (``opt``, ``opt_arg`` or ``arg``) and fills ``COMPREPLY``
   from the matching completion source.

Every literal coming from the configuration is emitted through
``escaping.quote``; lookups of undeclared flags or slots default to false.
Requires bash 4 (associative arrays, ``mapfile``).
"""

from __future__ import annotations

import re

from ...config import Builtin, BuiltinKind, Command, CompletionSource, Config
from ...constants import DOUBLEDASH, TOOL_NAME
from ...escaping import quote, quote_for_embedding
from ..models import CompletionPlan

__all__ = ["function_name", "generate_bash", "register_bash"]

INDENT = "  "

_BUILTIN_COMPGEN_FLAGS = {
    BuiltinKind.FILES: "-f",
    BuiltinKind.DIRECTORIES: "-d",
}


def function_name(config: Config) -> str:
    """Name of the generated function: ``_`` + the command name as an identifier."""
    return "_" + re.sub(r"[^A-Za-z0-9_]", "_", config.name)


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _comment(text: str) -> str:
    return "# " + " ".join(text.split())


def _indent(lines: list[str], depth: int) -> list[str]:
    return [f"{INDENT * depth}{line}" if line else "" for line in lines]


def _source_lines(source: CompletionSource | None) -> list[str]:
    """Lines adding the candidates of a completion source to COMPREPLY.

    Args:
        source: The completion source (None gives no candidates)

    Returns:
        Shell lines, not indented
    """
    if source is None:
        return []
    if isinstance(source, Builtin):
        return [
            f'mapfile -t lines < <(compgen {_BUILTIN_COMPGEN_FLAGS[source.kind]} -- "$cur")',
            'COMPREPLY+=( "${lines[@]}" )',
            "compopt -o filenames 2>/dev/null",
        ]
    if isinstance(source, Command):
        if not source.argv:
            return []
        argv = " ".join(quote(arg) for arg in source.argv)
        return [
            f"mapfile -t lines < <({argv} 2>/dev/null)",
            'for line in "${lines[@]}"; do',
            f'{INDENT}if [[ $line == "$cur"* ]]; then',
            f'{INDENT * 2}COMPREPLY+=( "$line" )',
            f"{INDENT}fi",
            "done",
        ]
    raise TypeError(f"Unknown completion source: {source!r}")


def _case_branch(pattern: str, body: list[str], comment: str = "") -> list[str]:
    lines = [f"{pattern})"]
    if comment:
        lines.append(INDENT + _comment(comment))
    lines.extend(_indent(body, 1))
    lines.append(f"{INDENT};;")
    return lines


def _state_lines(plan: CompletionPlan) -> list[str]:
    """Variables describing the configuration, declared at the top of the function."""
    config = plan.config
    lines = [
        f"local use_doubledash={_bool(config.use_doubledash)}",
        f"local has_short_opts={_bool(plan.has_flags)}",
        f"local short_opt_prefix={quote(config.short_opt_prefix)}",
        "",
        "declare -A short_opts_requires_value=()",
    ]
    lines.extend(f"short_opts_requires_value[{quote(entry.literal)}]={_bool(entry.takes_value)}" for entry in plan.flags)
    lines.append("")
    lines.append("declare -A short_opts_used=()")
    lines.extend(f"short_opts_used[{quote(entry.literal)}]=false" for entry in plan.flags)
    lines.append("")
    lines.extend(_comment(f"slot {slot.ordinal}: {slot.label}") for slot in plan.slots)
    lines.append("local -a args_required=(" + " ".join("true" for _ in plan.slots) + ")")
    lines.append("local -a explicit_slots=(" + " ".join(str(slot.ordinal) for slot in plan.explicit_order) + ")")
    return lines


def _option_scan_lines(plan: CompletionPlan) -> list[str]:
    """Scan the tokens before the cursor, recording used flags and the options boundary."""
    used_branches: list[str] = []
    for entry in plan.flags:
        used_branches.extend(_case_branch(quote(entry.literal), [f"short_opts_used[{quote(entry.literal)}]=true"]))

    loop_body = [
        "opts_last_word_i=$word_i",
        "",
        f"if $use_doubledash && [[ ${{COMP_WORDS[word_i]}} == {DOUBLEDASH} ]]; then",
        f"{INDENT}opts_finished=true",
        f"{INDENT}break",
        'elif [[ ${COMP_WORDS[word_i]} != "$short_opt_prefix"* ]]; then',
        f"{INDENT}opts_finished=true",
        f"{INDENT}opts_last_word_i=$(( word_i - 1 ))",
        f"{INDENT}break",
        "fi",
        "",
        "case ${COMP_WORDS[word_i]} in",
        *_indent(used_branches, 1),
        "esac",
        "",
        "if ${short_opts_requires_value[${COMP_WORDS[word_i]}]-false}; then",
        f"{INDENT}word_i=$(( word_i + 1 ))",
        f"{INDENT}opts_last_word_i=$word_i",
        "fi",
    ]
    return [
        "local opts_finished=true",
        "local opts_last_word_i=0",
        "if $has_short_opts; then",
        f"{INDENT}opts_finished=false",
        f"{INDENT}for (( word_i = 1; word_i <= COMP_CWORD - 1; word_i++ )); do",
        *_indent(loop_body, 2),
        f"{INDENT}done",
        "fi",
    ]


def _skip_if_lines(plan: CompletionPlan) -> list[str]:
    """Lift the requirement of slots whose skip_if flags were used."""
    lines: list[str] = []
    for slot in plan.slots:
        if slot.spec.skip_if is None:
            continue
        for flag in slot.spec.skip_if.has_opt_any:
            lines.extend(
                [
                    f"if ${{short_opts_used[{quote(flag)}]-false}}; then",
                    f"{INDENT}args_required[{slot.ordinal}]=false",
                    "fi",
                ]
            )
    return lines


def _slot_resolution_lines() -> list[str]:
    """Assign each token after the boundary to the next required slot, then to the catch-all."""
    return [
        "local arg_slot=",
        "slot_pos=0",
        "for (( word_i = opts_last_word_i + 1; word_i <= COMP_CWORD; word_i++ )); do",
        f"{INDENT}arg_slot=all",
        f"{INDENT}while (( slot_pos < ${{#explicit_slots[@]}} )); do",
        f"{INDENT * 2}slot=${{explicit_slots[slot_pos]}}",
        f"{INDENT * 2}slot_pos=$(( slot_pos + 1 ))",
        f"{INDENT * 2}if ${{args_required[slot]-false}}; then",
        f"{INDENT * 3}arg_slot=$slot",
        f"{INDENT * 3}break",
        f"{INDENT * 2}fi",
        f"{INDENT}done",
        "done",
    ]


def _mode_lines() -> list[str]:
    return [
        "local mode",
        "if ! $has_short_opts; then",
        f"{INDENT}mode=arg",
        "elif $opts_finished; then",
        f"{INDENT}mode=arg",
        "elif (( COMP_CWORD >= 2 )) && [[ -n $prev ]] && ${short_opts_requires_value[$prev]-false}; then",
        f"{INDENT}mode=opt_arg",
        'elif [[ $cur == "$short_opt_prefix"* ]]; then',
        f"{INDENT}mode=opt",
        "else",
        f"{INDENT}mode=arg",
        "fi",
    ]


def _opt_arg_branches(plan: CompletionPlan) -> list[str]:
    """One branch per option whose value has a completion source."""
    branches: list[str] = []
    for opt in plan.config.opts:
        if opt.value is None or opt.value.comp is None:
            continue
        entries = plan.flags_for(opt)
        if not entries:
            continue
        pattern = " | ".join(quote(entry.literal) for entry in entries)
        branches.extend(_case_branch(pattern, _source_lines(opt.value.comp), opt.value.name))
    return branches


def _arg_branches(plan: CompletionPlan) -> list[str]:
    branches: list[str] = []
    for slot in plan.explicit_order:
        if slot.spec.comp is not None:
            branches.extend(_case_branch(str(slot.ordinal), _source_lines(slot.spec.comp), slot.label))
    if plan.catch_all is not None and plan.catch_all.spec.comp is not None:
        branches.extend(_case_branch("all", _source_lines(plan.catch_all.spec.comp), plan.catch_all.label))
    return branches


def _candidate_lines(plan: CompletionPlan) -> list[str]:
    """Fill COMPREPLY according to the selected mode."""
    mode_branches: list[str] = []
    if plan.has_flags:
        word_list = " ".join(quote_for_embedding(entry.literal) for entry in plan.flags)
        mode_branches.extend(
            _case_branch(
                "opt",
                [
                    f"mapfile -t lines < <(compgen -W '{word_list}' -- \"$cur\")",
                    'for line in "${lines[@]}"; do',
                    f"{INDENT}COMPREPLY+=( \"$(printf '%q' \"$line\")\" )",
                    "done",
                ],
            )
        )
        mode_branches.extend(_case_branch("opt_arg", ["case $prev in", *_indent(_opt_arg_branches(plan), 1), "esac"]))
    if plan.config.args:
        mode_branches.extend(_case_branch("arg", ["case $arg_slot in", *_indent(_arg_branches(plan), 1), "esac"]))
    return ["case $mode in", *_indent(mode_branches, 1), "esac"]


def generate_bash(config: Config) -> str:
    """Generate the bash completion function for a command.

    Args:
        config: The validated configuration

    Returns:
        The script text (without the registration line)
    """
    plan = CompletionPlan.from_config(config)
    body = [
        "local cur=${COMP_WORDS[COMP_CWORD]}",
        "local prev=${COMP_WORDS[COMP_CWORD-1]}",
        "COMPREPLY=()",
        "",
        *_state_lines(plan),
        "",
        "local word_i slot_pos slot line",
        "local -a lines",
        "",
        *_option_scan_lines(plan),
        *_skip_if_lines(plan),
        "",
        *_slot_resolution_lines(),
        "",
        *_mode_lines(),
        "",
        *_candidate_lines(plan),
    ]
    lines = [
        _comment(f"bash completion for {config.name}"),
        _comment(f"generated by {TOOL_NAME}, do not edit"),
        "",
        f"{function_name(config)}() {{",
        *_indent(body, 1),
        "}",
    ]
    return "\n".join(lines)


def register_bash(config: Config) -> str:
    """Return the statement binding the generated function to the command name."""
    return f"complete -F {function_name(config)} {quote(config.name)}"
