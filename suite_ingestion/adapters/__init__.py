"""Delimited-text adapters: tokenizer (text -> rows) and writer (rows -> text)."""

from suite_ingestion.adapters.csv_tokenizer import (
    UNCLOSED_QUOTE_MESSAGE,
    ParseError,
    ParseOptions,
    ParseResult,
    parse,
)
from suite_ingestion.adapters.csv_writer import escape_field, write_records, write_rows

__all__ = [
    "UNCLOSED_QUOTE_MESSAGE",
    "ParseError",
    "ParseOptions",
    "ParseResult",
    "escape_field",
    "parse",
    "write_records",
    "write_rows",
]
