"""In-memory record collection backed by one table file."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Callable

from json_tables.persistence import read_records, write_records
from json_tables.values import is_numeric, to_number


class RecordStore:
    """Ordered records of one table, loaded from and saved to its JSON file.

    A store lives for a single operation. Nothing is cached between
    operations: callers create a store, load it, and drop it.
    """

    def __init__(self, file_path: Path) -> None:
        self.file_path = file_path
        self._records: list[dict[str, Any]] | None = None

    @property
    def loaded(self) -> bool:
        return self._records is not None

    @property
    def records(self) -> list[dict[str, Any]]:
        """The loaded records, loading them on first access."""
        if self._records is None:
            self.load()
        return self._records  # type: ignore[return-value]

    def load(self) -> RecordStore:
        """Read the table file."""
        self._records = read_records(self.file_path)
        return self

    def refresh(self) -> RecordStore:
        """Discard what is held and re-read the file.

        Mutations call this right before modifying records so the window
        for losing another writer's change stays as small as possible.
        """
        self._records = None
        return self.load()

    def next_id(self) -> int:
        """Return one more than the largest numeric id, or 1 for an empty table."""
        max_id = 0
        for record in self.records:
            value = record.get("id")
            if not is_numeric(value):
                continue
            number = to_number(value)
            if isinstance(number, float) and not math.isfinite(number):
                continue
            max_id = max(max_id, int(number))
        return max_id + 1

    def append(self, record: dict[str, Any]) -> None:
        self.records.append(record)

    def find_indexes(self, predicate: Callable[[dict[str, Any]], bool]) -> list[int]:
        """Positions of the records the predicate accepts."""
        return [i for i, record in enumerate(self.records) if predicate(record)]

    def save(self) -> None:
        """Atomically write the held records back to the table file."""
        write_records(self.file_path, self.records)

    def __len__(self) -> int:
        return len(self.records)
