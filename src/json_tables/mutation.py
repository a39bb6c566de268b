"""Insert and update against a record store.

Both operations re-read the table right before changing it and write the
whole table back with an atomic replace. There is no lock around the
read-modify-write: two processes inserting at the same moment can hand out
the same id, and concurrent updates resolve as last-writer-wins.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from json_tables.errors import EmptyPayload, ImmutableField, MissingFilter, NotAMapping
from json_tables.executor import matches
from json_tables.query import QueryState
from json_tables.store import RecordStore

logger = logging.getLogger(__name__)

ID_FIELD = "id"


def _check_payload(data: Any, action: str) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise NotAMapping(
            f"{action} data must be a mapping of field names to values, got {type(data).__name__}."
        )
    if not data:
        raise EmptyPayload(
            f"{action} data cannot be empty. Provide a mapping of field => value pairs."
        )
    for key in data:
        if not isinstance(key, str):
            raise NotAMapping(f"{action} data keys must be field name strings, got {key!r}.")
    return dict(data)


def insert(store: RecordStore, data: Mapping[str, Any]) -> int:
    """Append a record with a freshly generated id and return the id.

    Raises:
        NotAMapping: ``data`` is not a field -> value mapping.
        EmptyPayload: ``data`` is empty.
        ImmutableField: ``data`` carries its own id.
    """
    payload = _check_payload(data, "Insert")
    if ID_FIELD in payload:
        raise ImmutableField("Insert data cannot contain an \"id\" field. Record IDs are generated.")

    store.refresh()
    new_id = store.next_id()
    store.append({ID_FIELD: new_id, **payload})
    store.save()

    logger.debug("Inserted record %d into %s", new_id, store.file_path)
    return new_id


def update(store: RecordStore, state: QueryState, data: Mapping[str, Any]) -> int:
    """Merge ``data`` into every record matching the state's conditions.

    Fields not named in ``data`` are kept. Returns the number of records
    changed; zero matches is not an error and leaves the file untouched.

    Raises:
        NotAMapping: ``data`` is not a field -> value mapping.
        EmptyPayload: ``data`` is empty.
        MissingFilter: The state has no WHERE condition.
        ImmutableField: ``data`` tries to set the id.
    """
    payload = _check_payload(data, "Update")
    if ID_FIELD in payload:
        raise ImmutableField("Cannot update the \"id\" field. Record IDs are immutable.")
    if not state.has_filters:
        raise MissingFilter(
            "UPDATE requires at least one WHERE clause to prevent accidental mass updates. "
            "Use where() first."
        )

    store.refresh()
    table = store.file_path.stem
    indexes = store.find_indexes(lambda record: matches(record, state.conditions, table))
    if not indexes:
        logger.debug("Update matched no records in %s", store.file_path)
        return 0

    records = store.records
    for index in indexes:
        records[index] = {**records[index], **payload}
    store.save()

    logger.debug("Updated %d records in %s", len(indexes), store.file_path)
    return len(indexes)
