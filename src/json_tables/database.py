"""Database and table handles: the public entry points of the engine."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

from json_tables import executor, mutation
from json_tables.errors import ConfigurationError, NotFound
from json_tables.query import QueryState
from json_tables.store import RecordStore

logger = logging.getLogger(__name__)

# Databases live in subdirectories of this root unless told otherwise
DEFAULT_ROOT = Path("Database")

TABLE_SUFFIX = ".json"


def validate_name(name: Any, kind: str) -> str:
    """Check a database or table name and return it stripped.

    Names map directly onto directory and file names, so they may not be
    empty, contain path separators, or refer to the current/parent directory.
    """
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"{kind.capitalize()} name cannot be empty. Please provide a valid {kind} name.")
    name = name.strip()
    separators = {"/", "\\", os.sep} | ({os.altsep} if os.altsep else set())
    if name in (".", "..") or "\x00" in name or any(sep in name for sep in separators):
        raise ConfigurationError(f"Invalid {kind} name '{name}'.")
    return name


class Table:
    """Handle on one table file.

    ``where()`` and ``order()`` accumulate a pending query and return the
    handle for chaining. Each terminal call (``all``, ``get``, ``first``,
    ``last``, ``count``, ``insert``, ``update``) takes the pending query,
    leaving an empty one behind before doing any work, so a query never
    carries over into the next call even when the terminal call fails.
    """

    def __init__(self, database: Database, name: str) -> None:
        self.database = database
        self.name = validate_name(name, "table")
        self.file_path = database.path / f"{self.name}{TABLE_SUFFIX}"
        self._pending = QueryState.empty()
        # Loaded at selection so unreadable or malformed tables fail early;
        # used by the first terminal call only.
        self._store: RecordStore | None = RecordStore(self.file_path).load()

    @property
    def pending(self) -> QueryState:
        """The query that the next terminal call will run."""
        return self._pending

    def where(self, field: str, operator: str, value: Any) -> Table:
        self._pending = self._pending.where(field, operator, value)
        return self

    def order(self, field: str, direction: str = "ASC") -> Table:
        self._pending = self._pending.order(field, direction)
        return self

    def _take(self) -> tuple[QueryState, RecordStore]:
        state, self._pending = self._pending, QueryState.empty()
        store, self._store = self._store, None
        if store is None:
            store = RecordStore(self.file_path)
        return state, store

    def _select(self) -> list[dict[str, Any]]:
        state, store = self._take()
        return executor.execute(store.records, state, self.name)

    def all(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Return every matching record, optionally only the first ``limit``."""
        return executor.apply_limit(self._select(), limit)

    def get(self) -> dict[str, Any]:
        """Return the first matching record.

        Raises:
            NotFound: Nothing matched.
        """
        results = self._select()
        if not results:
            raise NotFound(f"No matching record in table '{self.name}'")
        return results[0]

    first = get

    def last(self) -> dict[str, Any]:
        """Return the last matching record.

        Raises:
            NotFound: Nothing matched.
        """
        results = self._select()
        if not results:
            raise NotFound(f"No matching record in table '{self.name}'")
        return results[-1]

    def count(self) -> int:
        """Return the number of matching records."""
        return len(self._select())

    def insert(self, data: Mapping[str, Any]) -> int:
        """Insert a record and return its generated id."""
        _, store = self._take()
        return mutation.insert(store, data)

    def update(self, data: Mapping[str, Any]) -> int:
        """Update the records matched by ``where()``; returns how many changed."""
        state, store = self._take()
        return mutation.update(store, state, data)

    def __repr__(self) -> str:
        return f"Table({self.database.name!r}, {self.name!r})"


class Database:
    """A directory of table files."""

    def __init__(self, name: str, root: Path | str = DEFAULT_ROOT) -> None:
        """Open an existing database directory.

        Args:
            name: Directory name of the database under ``root``.
            root: Directory holding all databases.

        Raises:
            ConfigurationError: The name is invalid or the directory is
                missing or unreadable.
        """
        self.name = validate_name(name, "database")
        self.root = Path(root)
        self.path = self.root / self.name

        if not self.path.is_dir():
            raise ConfigurationError(f"Unable to find database directory '{self.name}' at: {self.path}")
        if not os.access(self.path, os.R_OK | os.X_OK):
            raise ConfigurationError(f"Database directory '{self.name}' is not readable. Check file permissions.")

        logger.debug("Opened database %s", self.path)

    def table(self, name: str) -> Table:
        """Select a table; a table without a file yet is simply empty."""
        return Table(self, name)

    def tables(self) -> list[str]:
        """Names of the tables that have a file in this database."""
        return sorted(
            path.stem
            for path in self.path.glob(f"*{TABLE_SUFFIX}")
            if path.is_file() and not path.name.startswith(".")
        )

    def __repr__(self) -> str:
        return f"Database({self.name!r}, root={str(self.root)!r})"


def open_database(name: str, root: Path | str = DEFAULT_ROOT) -> Database:
    """Open the database directory ``root/name``."""
    return Database(name, root)
