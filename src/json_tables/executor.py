"""Evaluates query state against loaded records."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Iterable

from json_tables.errors import InvalidOperator, UnknownField
from json_tables.query import Condition, OrderBy, QueryState
from json_tables.values import loose_compare, loose_equals, spaceship, to_text


def evaluate(field_value: Any, operator: str, test_value: Any) -> bool:
    """Apply one operator to a field value and a test value.

    Comparisons use loose coercion (see ``json_tables.values``). Pairs that
    cannot be ordered fail every ordering operator and compare unequal.
    """
    if operator == "=":
        return loose_equals(field_value, test_value)
    if operator == "!=":
        return not loose_equals(field_value, test_value)
    if operator == "LIKE":
        return to_text(test_value) in to_text(field_value)

    result = loose_compare(field_value, test_value)
    if result is None:
        return False
    if operator == "<":
        return result < 0
    if operator == ">":
        return result > 0
    if operator == "<=":
        return result <= 0
    if operator == ">=":
        return result >= 0
    raise InvalidOperator(f"Unsupported WHERE operator: {operator}")


def matches(record: dict[str, Any], conditions: Iterable[Condition], table: str | None = None) -> bool:
    """Return True if the record satisfies every condition.

    Conditions are checked in order and checking stops at the first one that
    fails, so a missing field is only reported once the record gets that far.
    """
    for condition in conditions:
        if condition.field not in record:
            raise UnknownField(condition.field, table)
        if not evaluate(record[condition.field], condition.operator, condition.value):
            return False
    return True


def filter_records(
    records: list[dict[str, Any]], conditions: tuple[Condition, ...], table: str | None = None
) -> list[dict[str, Any]]:
    if not conditions:
        return list(records)
    return [record for record in records if matches(record, conditions, table)]


def _compare_sort_values(a: Any, b: Any) -> int:
    if a is None and b is None:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    return spaceship(a, b)


def sort_records(
    records: list[dict[str, Any]], order_by: OrderBy | None, table: str | None = None
) -> list[dict[str, Any]]:
    """Stable sort on a single field, nulls first.

    Only the first record is checked for the field; later records that lack
    it sort as null. Descending order reverses the finished ascending list.
    """
    if order_by is None or not records:
        return records
    if order_by.field not in records[0]:
        raise UnknownField(order_by.field, table, clause="ORDER BY")

    field = order_by.field
    ordered = sorted(
        records,
        key=cmp_to_key(lambda a, b: _compare_sort_values(a.get(field), b.get(field))),
    )
    if order_by.descending:
        ordered.reverse()
    return ordered


def execute(
    records: list[dict[str, Any]], state: QueryState, table: str | None = None
) -> list[dict[str, Any]]:
    """Filter then sort records according to the query state."""
    results = filter_records(records, state.conditions, table)
    return sort_records(results, state.order_by, table)


def apply_limit(results: list[dict[str, Any]], limit: int | None) -> list[dict[str, Any]]:
    """Keep the first ``limit`` results; ``None`` or a value <= 0 keeps all."""
    if limit is None or limit <= 0:
        return results
    return results[: int(limit)]
