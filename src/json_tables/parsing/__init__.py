"""Parsing module for the JTQ query language."""

from json_tables.parsing.query_parser import (
    FieldValue,
    InsertQuery,
    QueryParser,
    SelectQuery,
    ShowTablesQuery,
    UpdateQuery,
    UseQuery,
)

__all__ = [
    "FieldValue",
    "InsertQuery",
    "QueryParser",
    "SelectQuery",
    "ShowTablesQuery",
    "UpdateQuery",
    "UseQuery",
]
