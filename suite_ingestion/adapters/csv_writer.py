"""
Delimited-text writer: the inverse of the tokenizer's quoting rules.

Used to render sample documents and exports. Output always parses back to
the same cells with the default tokenizer options.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

_QUOTE = '"'


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(_to_text(v) for v in value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def needs_quoting(value: str, delimiter: str = ",") -> bool:
    """True when the value would not survive an unquoted, trimmed round trip."""
    if not value:
        return False
    if delimiter in value or _QUOTE in value or "\r" in value or "\n" in value:
        return True
    return value != value.strip()


def escape_field(value: Any, delimiter: str = ",") -> str:
    """Quote a cell (doubling internal quotes) when it needs quoting."""
    text = _to_text(value)
    if needs_quoting(text, delimiter):
        return _QUOTE + text.replace(_QUOTE, _QUOTE * 2) + _QUOTE
    return text


def write_rows(
    rows: Iterable[Iterable[Any]],
    delimiter: str = ",",
    line_terminator: str = "\n",
) -> str:
    """Render rows as delimited text. No trailing terminator."""
    return line_terminator.join(
        delimiter.join(escape_field(cell, delimiter) for cell in row) for row in rows
    )


def write_records(
    records: Iterable[dict[str, Any]],
    columns: Iterable[str],
    delimiter: str = ",",
    line_terminator: str = "\n",
) -> str:
    """Render dict records under a header row. Missing keys become empty cells."""
    cols = tuple(columns)
    body = ([record.get(c) for c in cols] for record in records)
    return write_rows([cols, *body], delimiter, line_terminator)
