#!/usr/bin/env python3
"""
Run one bulk import session: upload a CSV file, auto-map its headers, preview, and commit.

Records are inserted into a SQL table (created if missing) named after the
entity, e.g. ``imported_contacts``.

Usage:
    python3 scripts/run_import.py --entity <name> --file <path> [options]

Examples:
    # Preview only: counts and the first rows with their errors
    python3 scripts/run_import.py --entity contact --file contacts.csv --preview-only

    # Import valid rows into a SQLite database
    python3 scripts/run_import.py --entity employee --file staff.csv --db-url sqlite:///suite.db

    # Semicolon-delimited file, include rows that failed validation
    python3 scripts/run_import.py --entity expense --file exp.csv --delimiter ";" --include-invalid

    # Override an auto-mapped column (repeatable; empty header unmaps)
    python3 scripts/run_import.py --entity invoice --file inv.csv --map rate="Unit Price"

    # Write the entity's sample document and exit
    python3 scripts/run_import.py --entity transaction --write-sample transaction-sample.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

DB_URL = "sqlite:///imports.db"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run import session: upload -> map -> preview -> commit.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--entity", required=True, help="Entity schema name (e.g. contact, invoice).")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="Path to the CSV file to import.")
    source.add_argument(
        "--write-sample",
        type=Path,
        metavar="PATH",
        help="Write the entity's sample CSV to PATH and exit.",
    )
    parser.add_argument("--delimiter", default=None, help="Field delimiter (default: from settings).")
    parser.add_argument("--no-headers", action="store_true", help="First row is data, not headers.")
    parser.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="FIELD=HEADER",
        help="Override the mapping of one field. Repeatable. Empty HEADER unmaps the field.",
    )
    parser.add_argument("--include-invalid", action="store_true", help="Also import rows that failed validation.")
    parser.add_argument("--preview-only", action="store_true", help="Print the preview and exit. No writes.")
    parser.add_argument("--db-url", default=DB_URL, help=f"Database URL (default: {DB_URL!r}).")
    parser.add_argument("--settings", type=Path, default=None, help="Import settings YAML file.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Structured log level on stderr (default: WARNING).",
    )
    return parser.parse_args(argv)


def _parse_overrides(items: list[str]) -> list[tuple[str, str | None]]:
    overrides: list[tuple[str, str | None]] = []
    for item in items:
        if "=" not in item:
            raise ValueError(f"--map expects FIELD=HEADER, got {item!r}")
        key, header = item.split("=", 1)
        overrides.append((key.strip(), header or None))
    return overrides


def _print_preview(session) -> None:
    preview = session.preview_result
    parsed = session.parse_result
    print(f"Entity:   {session.schema.display_name}")
    print(f"File:     {session.filename}")
    print(f"Rows:     {parsed.total_rows} ({preview.valid_count} valid, {preview.error_count} with errors)")
    for err in parsed.parse_errors:
        print(f"Parse error at row {err.row_number}: {err.message}")
    print("Mapping:")
    for fd in session.schema.fields:
        header = session.mapping.get(fd.key)
        marker = "*" if fd.required else " "
        print(f"  {marker} {fd.label:<22} <- {header if header else '(skipped)'}")
    for row in preview.rows:
        status = "ok" if row.outcome.valid else "; ".join(row.outcome.errors)
        print(f"  row {row.row_number}: {status}")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from suite_config import get_entity_schema, load_import_settings
    from suite_ingestion.adapters.csv_tokenizer import ParseOptions
    from suite_ingestion.services import ImportService
    from suite_kernel.exceptions import ConfigError, UploadRejectedError
    from suite_kernel.logging_config import configure_logging

    configure_logging(level=getattr(logging, args.log_level))

    try:
        schema = get_entity_schema(args.entity)
        settings = load_import_settings(args.settings)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.write_sample:
        sample = schema.sample_document()
        args.write_sample.write_text(sample.content + "\n", encoding="utf-8")
        print(f"Wrote {sample.filename} ({sample.content_type}) to {args.write_sample}")
        return 0

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1

    try:
        overrides = _parse_overrides(args.map)
        options = ParseOptions(
            delimiter=args.delimiter if args.delimiter is not None else settings.delimiter,
            has_headers=not args.no_headers and settings.has_headers,
            trim_values=settings.trim_values,
        )
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    service = ImportService(settings)
    session = service.start(schema.name, parse_options=options)
    try:
        session.upload(source_path.read_bytes(), source_path.name)
    except UploadRejectedError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    try:
        for field_key, header in overrides:
            session.set_mapping(field_key, header)
    except (KeyError, ValueError) as e:
        print(f"ERROR: invalid --map: {e}", file=sys.stderr)
        return 2

    session.preview()
    _print_preview(session)
    if args.preview_only:
        session.cancel()
        return 0

    from sqlalchemy import MetaData, create_engine

    from suite_ingestion.inserters import SqlTableInserter, build_entity_table

    engine = create_engine(args.db_url)
    metadata = MetaData()
    table = build_entity_table(metadata, schema)
    metadata.create_all(engine)

    count = session.commit(SqlTableInserter(engine, table), include_invalid_rows=args.include_invalid)
    print(f"Imported {count} {schema.display_name.lower()} record(s) into {table.name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
