"""acdump - dump shell autocompleters from a declarative description.

Reads a YAML, JSON or TOML document describing the options and positional
arguments of a command, and compiles it into a completion function for an
interactive shell (bash).
"""
