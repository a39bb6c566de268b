"""JSON Tables - A file-based table store over JSON files."""

from json_tables.database import DEFAULT_ROOT, Database, Table, open_database
from json_tables.errors import (
    ConfigurationError,
    EmptyPayload,
    ImmutableField,
    InvalidDirection,
    InvalidField,
    InvalidOperator,
    IoError,
    JsonTablesError,
    MalformedData,
    MissingFilter,
    NotAMapping,
    NotFound,
    PersistenceError,
    RenameFailed,
    SerializationError,
    UnknownField,
)
from json_tables.query import Condition, OrderBy, QueryState

__all__ = [
    # Main API
    "open_database",
    "Database",
    "Table",
    "DEFAULT_ROOT",
    # Query state
    "QueryState",
    "Condition",
    "OrderBy",
    # Errors
    "JsonTablesError",
    "ConfigurationError",
    "MalformedData",
    "UnknownField",
    "InvalidField",
    "InvalidOperator",
    "InvalidDirection",
    "EmptyPayload",
    "NotAMapping",
    "MissingFilter",
    "ImmutableField",
    "NotFound",
    "PersistenceError",
    "IoError",
    "SerializationError",
    "RenameFailed",
]

__version__ = "0.1.0"
