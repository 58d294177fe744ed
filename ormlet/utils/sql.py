"""Identifier quoting, placeholder lists and quote-aware text substitution."""

import re
from collections.abc import Iterable, Mapping, Sized
from typing import Any, Callable

from ..errors import BuildError

WILDCARD = "*"

# One chunk of SQL text: a single- or double-quoted literal (with backslash
# escapes), or a run of characters outside any literal (group 1).
_CHUNK_PATTERN = re.compile(
    r""""[^"\\]*(?:\\.[^"\\]*)*"|'[^'\\]*(?:\\.[^'\\]*)*'|([^'"\\]+)""",
    re.S,
)


def quote_identifier_part(part: str, quote_character: str) -> str:
    """Quote one segment of an identifier; the ``*`` wildcard is left alone."""
    if part == WILDCARD:
        return part
    return f"{quote_character}{part}{quote_character}"


def quote_identifier(identifier: str, quote_character: str) -> str:
    """Quote a possibly dotted identifier (``table.column`` -> ```table`.`column```)."""
    return ".".join(
        quote_identifier_part(part, quote_character)
        for part in identifier.split(".")
    )


def create_placeholders(values: Sized) -> str:
    """Return ``?, ?, ?`` with one placeholder per value."""
    return ", ".join("?" for _ in range(len(values)))


def render_values(fields: Mapping[str, Any], expression_fields: Iterable[str] = ()) -> str:
    """Render the VALUES/SET right-hand sides for ``fields``.

    Expression fields are written literally; every other field becomes ``?``.
    """
    expression_fields = set(expression_fields)
    return ", ".join(
        str(value) if name in expression_fields else "?"
        for name, value in fields.items()
    )


def join_if_not_empty(glue: str, pieces: Iterable[Any]) -> str:
    """Join the non-empty pieces (strings are stripped first)."""
    kept = []
    for piece in pieces:
        if isinstance(piece, str):
            piece = piece.strip()
        if piece:
            kept.append(piece)
    return glue.join(kept)


def split_quoted_chunks(subject: str) -> list[tuple[bool, str]]:
    """Split SQL text into ``(is_quoted_literal, text)`` chunks.

    Raises:
        BuildError: if the text has an unterminated literal or a stray backslash.
    """
    chunks = []
    position = 0
    for match in _CHUNK_PATTERN.finditer(subject):
        if match.start() != position:
            break
        chunks.append((match.group(1) is None, match.group(0)))
        position = match.end()
    if position != len(subject):
        raise BuildError(f"Cannot parse quoted literals in SQL text: {subject!r}")
    return chunks


def replace_outside_quotes(
    subject: str,
    search: str,
    replacement: str | Callable[[re.Match], str],
) -> str:
    """Replace ``search`` with ``replacement`` everywhere except inside quoted literals."""
    if callable(replacement):
        repl = replacement
    else:
        repl = lambda _match: replacement  # noqa: E731
    pattern = re.compile(re.escape(search))
    return "".join(
        chunk if quoted else pattern.sub(repl, chunk)
        for quoted, chunk in split_quoted_chunks(subject)
    )


def quote_literal(value: Any) -> str:
    """Render a value as an SQL string literal, for display only."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        value = int(value)
    return "'" + str(value).replace("'", "''") + "'"


def bind_parameters(sql: str, parameters: Iterable[Any]) -> str:
    """Substitute each ``?`` outside literals with the next parameter, quoted.

    The result is meant for logs; it is never sent to the database.
    """
    parameters = list(parameters)
    if not parameters:
        return sql
    remaining = iter(parameters)

    def substitute(match: re.Match) -> str:
        try:
            return quote_literal(next(remaining))
        except StopIteration:
            return match.group(0)

    return replace_outside_quotes(sql, "?", substitute)
