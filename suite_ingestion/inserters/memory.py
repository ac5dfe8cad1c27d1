"""In-memory RecordInserter. Keeps every batch it receives."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class InMemoryInserter:
    """Records each insert() call; records are copied so later mutation cannot leak in."""

    def __init__(self) -> None:
        self.calls: list[list[dict[str, Any]]] = []

    def insert(self, records: Sequence[dict[str, Any]]) -> None:
        self.calls.append([dict(r) for r in records])

    @property
    def records(self) -> list[dict[str, Any]]:
        return [r for batch in self.calls for r in batch]
