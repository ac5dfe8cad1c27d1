"""Insert collaborators: the protocol plus in-memory and SQLAlchemy implementations."""

from suite_ingestion.inserters.base import RecordInserter
from suite_ingestion.inserters.memory import InMemoryInserter
from suite_ingestion.inserters.sql import SqlTableInserter, build_entity_table

__all__ = [
    "InMemoryInserter",
    "RecordInserter",
    "SqlTableInserter",
    "build_entity_table",
]
