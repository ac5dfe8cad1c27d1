"""
SQLAlchemy RecordInserter: writes one committed batch into a table.

The whole batch goes through a single transaction (engine.begin()) and a
single executemany insert. Partial records are widened to the union of keys
in the batch, with None for absent fields.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Boolean, Column, Date, Engine, Float, Integer, MetaData, String, Table

from suite_config.schema import EntitySchema, FieldKind
from suite_kernel.logging_config import get_logger

logger = get_logger("ingestion.sql_inserter")

_COLUMN_TYPES = {
    FieldKind.TEXT: String,
    FieldKind.NUMBER: Float,
    FieldKind.DATE: Date,
    FieldKind.BOOLEAN: Boolean,
    FieldKind.ENUM: String,
}


def build_entity_table(
    metadata: MetaData,
    schema: EntitySchema,
    table_name: str | None = None,
) -> Table:
    """Core Table with an autoincrement id and one nullable column per schema field.

    Required fields are enforced by row validation, not by the table: rows
    committed with include_invalid_rows may lack them.
    """
    columns = [Column("id", Integer, primary_key=True, autoincrement=True)]
    for fd in schema.fields:
        columns.append(Column(fd.key, _COLUMN_TYPES[fd.kind](), nullable=True))
    return Table(table_name or f"imported_{schema.name}s", metadata, *columns)


class SqlTableInserter:
    """Insert a batch of records into one table in a single transaction."""

    def __init__(self, engine: Engine, table: Table):
        self._engine = engine
        self._table = table

    def insert(self, records: Sequence[dict[str, Any]]) -> None:
        if not records:
            logger.info("sql_insert_skipped", extra={"table": self._table.name})
            return

        keys: list[str] = []
        for record in records:
            for key in record:
                if key not in keys:
                    keys.append(key)
        unknown = [k for k in keys if k not in self._table.c]
        if unknown:
            raise ValueError(f"Columns not in table {self._table.name}: {', '.join(unknown)}")

        rows = [{k: record.get(k) for k in keys} for record in records]
        with self._engine.begin() as conn:
            conn.execute(self._table.insert(), rows)
        logger.info(
            "sql_insert_completed",
            extra={"table": self._table.name, "row_count": len(rows)},
        )
