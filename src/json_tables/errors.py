"""Exception types raised by the table engine."""

from __future__ import annotations


class JsonTablesError(Exception):
    """Base class for all engine failures."""


class ConfigurationError(JsonTablesError):
    """Bad database/table name or an unusable database directory."""


class MalformedData(JsonTablesError):
    """A table file is not a JSON array of objects."""


class UnknownField(JsonTablesError, KeyError):
    """A filter or sort references a field the record does not have."""

    def __init__(self, field: str, table: str | None = None, clause: str = "WHERE") -> None:
        self.field = field
        self.table = table
        self.clause = clause
        where = f" in table '{table}'" if table else ""
        super().__init__(f"{clause} field '{field}' does not exist{where}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class InvalidField(JsonTablesError, ValueError):
    """A field name is empty or not a string."""


class InvalidOperator(JsonTablesError, ValueError):
    """A WHERE operator outside the supported set."""


class InvalidDirection(JsonTablesError, ValueError):
    """An ORDER BY direction other than ASC or DESC."""


class EmptyPayload(JsonTablesError, ValueError):
    """Insert or update data is empty."""


class NotAMapping(JsonTablesError, TypeError):
    """Insert or update data is not a field -> value mapping."""


class MissingFilter(JsonTablesError):
    """An update was requested without any WHERE condition."""


class ImmutableField(JsonTablesError):
    """An attempt to set a record's id."""


class NotFound(JsonTablesError, LookupError):
    """A single-record retrieval matched nothing."""


class PersistenceError(JsonTablesError):
    """Base class for failures while reading or writing table files."""

    def __init__(self, message: str, path: object = None) -> None:
        super().__init__(message)
        self.path = path


class IoError(PersistenceError):
    """The file system refused a read, write or directory creation."""


class SerializationError(PersistenceError):
    """Records hold a value that cannot be represented as JSON."""


class RenameFailed(PersistenceError):
    """The atomic replace step failed; the target file is unchanged."""
