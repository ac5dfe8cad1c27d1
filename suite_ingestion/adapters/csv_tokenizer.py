"""
Delimited-text tokenizer.

Character-level state machine that turns in-memory text into headers, data
rows and non-fatal parse errors. Handles RFC 4180 style quoting (doubled
quote escape, delimiters and line breaks inside quotes), LF / CRLF / CR
terminators mixed within one document, and a configurable delimiter.

Contract:
    parse() never raises on malformed input. Anomalies are reported in
    ParseResult.parse_errors and best-effort data is returned around them.
    Only invalid ParseOptions (a programming error) raise ValueError.

Architecture: suite_ingestion/adapters. Pure; no file I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from suite_config.schema import ImportSettings
from suite_kernel.logging_config import get_logger

logger = get_logger("ingestion.csv_tokenizer")

UNCLOSED_QUOTE_MESSAGE = "Unclosed quoted field"

_QUOTE = '"'
_CR = "\r"
_LF = "\n"


class _State(Enum):
    FIELD_START = "field_start"
    UNQUOTED_FIELD = "unquoted_field"
    QUOTED_FIELD = "quoted_field"
    QUOTE_IN_QUOTED_FIELD = "quote_in_quoted_field"


@dataclass(frozen=True)
class ParseOptions:
    """Tokenizer options. trim_values applies to unquoted content only."""

    delimiter: str = ","
    has_headers: bool = True
    max_rows: int | None = None
    trim_values: bool = True

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
        if self.delimiter in (_QUOTE, _CR, _LF):
            raise ValueError(f"delimiter cannot be {self.delimiter!r}")
        if self.max_rows is not None and self.max_rows < 0:
            raise ValueError("max_rows must be non-negative")

    @classmethod
    def from_settings(cls, settings: ImportSettings, max_rows: int | None = None) -> ParseOptions:
        return cls(
            delimiter=settings.delimiter,
            has_headers=settings.has_headers,
            max_rows=max_rows,
            trim_values=settings.trim_values,
        )


@dataclass(frozen=True)
class ParseError:
    """Non-fatal anomaly. row_number is the 1-based position among emitted rows."""

    row_number: int
    message: str


@dataclass(frozen=True)
class ParseResult:
    """Tokenizer output. total_rows ignores max_rows."""

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    total_rows: int
    parse_errors: tuple[ParseError, ...] = ()

    @property
    def truncated(self) -> bool:
        return len(self.rows) < self.total_rows


class _RowBuilder:
    """Accumulates fields and rows; owns the trim and blank-line rules."""

    def __init__(self, trim_values: bool):
        self._trim = trim_values
        self.rows: list[tuple[str, ...]] = []
        self._fields: list[str] = []
        self._chars: list[str] = []
        self._row_quoted = False
        self.quoted = False

    def append(self, ch: str) -> None:
        self._chars.append(ch)

    def end_field(self) -> None:
        value = "".join(self._chars)
        if self._trim and not self.quoted:
            value = value.strip()
        self._fields.append(value)
        self._chars = []
        self._row_quoted = self._row_quoted or self.quoted
        self.quoted = False

    def end_row(self) -> None:
        self.end_field()
        fields = self._fields
        quoted = self._row_quoted
        self._fields = []
        self._row_quoted = False
        # A blank line is a row of exactly one unquoted empty field; "" is a value
        if len(fields) == 1 and fields[0] == "" and not quoted:
            return
        self.rows.append(tuple(fields))


def _tokenize(text: str, delimiter: str, trim_values: bool) -> tuple[list[tuple[str, ...]], list[ParseError]]:
    builder = _RowBuilder(trim_values)
    errors: list[ParseError] = []
    state = _State.FIELD_START
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        i += 1

        if state is _State.QUOTED_FIELD:
            if ch == _QUOTE:
                state = _State.QUOTE_IN_QUOTED_FIELD
            else:
                builder.append(ch)
            continue

        if state is _State.QUOTE_IN_QUOTED_FIELD and ch == _QUOTE:
            builder.append(_QUOTE)
            state = _State.QUOTED_FIELD
            continue

        if ch == delimiter:
            builder.end_field()
            state = _State.FIELD_START
        elif ch == _CR or ch == _LF:
            builder.end_row()
            if ch == _CR and i < n and text[i] == _LF:
                i += 1
            state = _State.FIELD_START
        elif state is _State.FIELD_START and ch == _QUOTE:
            builder.quoted = True
            state = _State.QUOTED_FIELD
        else:
            # Ordinary character; after a closing quote this is malformed
            # trailing data, kept as-is.
            builder.append(ch)
            state = _State.UNQUOTED_FIELD

    unclosed = state is _State.QUOTED_FIELD
    builder.end_row()
    if unclosed:
        # The open field is quoted, so its row was emitted and is the last one
        errors.append(ParseError(len(builder.rows), UNCLOSED_QUOTE_MESSAGE))
    return builder.rows, errors


def parse(text: str, options: ParseOptions | None = None) -> ParseResult:
    """
    Parse delimited text into headers, data rows and parse errors.

    With has_headers the first non-blank row becomes the headers; otherwise
    headers are "Column 1".."Column N" sized to the first data row.
    max_rows caps the returned rows; total_rows always counts every data row.
    """
    opts = options or ParseOptions()
    all_rows, errors = _tokenize(text, opts.delimiter, opts.trim_values)

    if opts.has_headers and all_rows:
        headers = all_rows[0]
        data_rows = all_rows[1:]
    else:
        data_rows = all_rows
        width = len(data_rows[0]) if data_rows else 0
        headers = tuple(f"Column {i}" for i in range(1, width + 1))

    total = len(data_rows)
    if opts.max_rows is not None:
        data_rows = data_rows[: opts.max_rows]

    logger.debug(
        "csv_parsed",
        extra={
            "column_count": len(headers),
            "total_rows": total,
            "returned_rows": len(data_rows),
            "parse_error_count": len(errors),
        },
    )
    return ParseResult(
        headers=tuple(headers),
        rows=tuple(data_rows),
        total_rows=total,
        parse_errors=tuple(errors),
    )
