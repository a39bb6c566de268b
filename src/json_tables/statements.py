"""Runs parsed JTQ statements against a database."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from json_tables.database import DEFAULT_ROOT, Database, Table, open_database
from json_tables.errors import ConfigurationError, NotFound
from json_tables.parsing.query_parser import (
    InsertQuery,
    Query,
    SelectQuery,
    ShowTablesQuery,
    UpdateQuery,
    UseQuery,
)
from json_tables.query import Condition

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Result of a statement."""

    columns: list[str]
    rows: list[dict[str, Any]]
    message: str | None = None


@dataclass
class UseResult(QueryResult):
    """Result of a USE statement."""

    database: str = ""


@dataclass
class InsertResult(QueryResult):
    """Result of an INSERT statement."""

    table: str = ""
    id: int | None = None


@dataclass
class UpdateResult(QueryResult):
    """Result of an UPDATE statement."""

    table: str = ""
    affected: int = 0


def result_columns(rows: list[dict[str, Any]]) -> list[str]:
    """Column names across all rows in first-seen order, ``id`` first."""
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    names = list(columns)
    if "id" in columns:
        names.remove("id")
        names.insert(0, "id")
    return names


class StatementRunner:
    """Executes JTQ statements, tracking the currently selected database."""

    def __init__(self, root: Path | str = DEFAULT_ROOT, database: str | None = None) -> None:
        self.root = Path(root)
        self.database: Database | None = None
        if database:
            self.use(database)

    def use(self, name: str) -> Database:
        self.database = open_database(name, self.root)
        return self.database

    def _table(self, name: str) -> Table:
        if self.database is None:
            raise ConfigurationError("No database selected. Use 'use <name>' first.")
        return self.database.table(name)

    @staticmethod
    def _apply_conditions(table: Table, conditions: list[Condition]) -> Table:
        for condition in conditions:
            table.where(condition.field, condition.operator, condition.value)
        return table

    def execute(self, query: Query) -> QueryResult:
        """Execute a parsed statement and return its result."""
        if isinstance(query, UseQuery):
            return self._execute_use(query)
        elif isinstance(query, ShowTablesQuery):
            return self._execute_show_tables()
        elif isinstance(query, SelectQuery):
            return self._execute_select(query)
        elif isinstance(query, InsertQuery):
            return self._execute_insert(query)
        elif isinstance(query, UpdateQuery):
            return self._execute_update(query)
        raise TypeError(f"Unknown statement: {type(query).__name__}")

    def _execute_use(self, query: UseQuery) -> UseResult:
        database = self.use(query.database)
        logger.debug("Switched to database %s", database.path)
        return UseResult(
            columns=[],
            rows=[],
            message=f"Using database: {database.name}",
            database=database.name,
        )

    def _execute_show_tables(self) -> QueryResult:
        if self.database is None:
            raise ConfigurationError("No database selected. Use 'use <name>' first.")
        rows = [{"table": name} for name in self.database.tables()]
        return QueryResult(columns=["table"], rows=rows)

    def _execute_select(self, query: SelectQuery) -> QueryResult:
        table = self._apply_conditions(self._table(query.table), query.conditions)
        if query.order_by is not None:
            table.order(query.order_by.field, query.order_by.direction)

        if query.mode == "count":
            return QueryResult(columns=["count"], rows=[{"count": table.count()}])

        if query.mode in ("first", "last"):
            try:
                record = table.first() if query.mode == "first" else table.last()
            except NotFound:
                rows = []
            else:
                rows = [record]
        else:
            rows = table.all(query.limit)
        return QueryResult(columns=result_columns(rows), rows=rows)

    def _execute_insert(self, query: InsertQuery) -> InsertResult:
        new_id = self._table(query.table).insert(query.data)
        return InsertResult(
            columns=[],
            rows=[],
            message=f"Inserted into {query.table} with id {new_id}",
            table=query.table,
            id=new_id,
        )

    def _execute_update(self, query: UpdateQuery) -> UpdateResult:
        table = self._apply_conditions(self._table(query.table), query.conditions)
        affected = table.update(query.data)
        return UpdateResult(
            columns=[],
            rows=[],
            message=f"Updated {affected} record{'s' if affected != 1 else ''} in {query.table}",
            table=query.table,
            affected=affected,
        )
