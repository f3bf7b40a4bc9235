"""Shell-safe literal encodings.

Every string the generators put into a script goes through one of these.
"""

__all__ = ["quote", "quote_for_embedding"]

# close the quote, emit a double-quoted quote, reopen
_QUOTE_ESCAPE = "'\"'\"'"


def quote(text: str) -> str:
    """Return `text` as a single-quoted shell literal.

    The result reads back as exactly `text` whatever it contains: quotes,
    backslashes, newlines or nothing at all.
    """
    return "'" + str(text).replace("'", _QUOTE_ESCAPE) + "'"


def quote_for_embedding(text: str) -> str:
    """Return `quote(text)` escaped once more for an already-open single-quoted context.

    Used for word lists that are themselves passed as one single-quoted
    argument, e.g. ``compgen -W '<word> <word>'``: the outer quotes strip one
    level, leaving ``quote(text)`` for compgen's own expansion.
    """
    return quote(text).replace("'", _QUOTE_ESCAPE)
