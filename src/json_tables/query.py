"""Query state: pending WHERE conditions and ORDER BY directive."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from json_tables.errors import InvalidDirection, InvalidField, InvalidOperator

OPERATORS = ("=", "!=", "<", ">", "<=", ">=", "LIKE")
DIRECTIONS = ("ASC", "DESC")


def _field_name(field: Any, clause: str) -> str:
    if not isinstance(field, str) or not field.strip():
        raise InvalidField(f"{clause} field name must be a non-empty string.")
    return field.strip()


def normalize_operator(operator: Any) -> str:
    """Validate an operator, upper-casing LIKE."""
    if isinstance(operator, str):
        candidate = operator.strip()
        if candidate.upper() == "LIKE":
            candidate = "LIKE"
        if candidate in OPERATORS:
            return candidate
    raise InvalidOperator(
        f"Invalid WHERE operator '{operator}'. Supported operators: {', '.join(OPERATORS)}"
    )


def normalize_direction(direction: Any) -> str:
    candidate = direction.strip().upper() if isinstance(direction, str) else direction
    if candidate not in DIRECTIONS:
        raise InvalidDirection(f"Invalid ORDER BY direction '{direction}'. Use 'ASC' or 'DESC'.")
    return candidate


@dataclass(frozen=True)
class Condition:
    """A single WHERE condition."""

    field: str
    operator: str  # one of OPERATORS
    value: Any


@dataclass(frozen=True)
class OrderBy:
    """The ORDER BY directive; only one sort key is supported."""

    field: str
    direction: str = "ASC"

    @property
    def descending(self) -> bool:
        return self.direction == "DESC"


@dataclass(frozen=True)
class QueryState:
    """Immutable accumulation of query intent for one terminal call.

    Conditions combine with AND. Builder methods validate their arguments
    immediately and return a new state; nothing here reads or writes files.
    """

    conditions: tuple[Condition, ...] = ()
    order_by: OrderBy | None = None

    @classmethod
    def empty(cls) -> QueryState:
        return cls()

    @property
    def has_filters(self) -> bool:
        return bool(self.conditions)

    @property
    def is_empty(self) -> bool:
        return not self.conditions and self.order_by is None

    def where(self, field: str, operator: str, value: Any) -> QueryState:
        """Return a state with one more condition appended."""
        condition = Condition(
            field=_field_name(field, "WHERE clause"),
            operator=normalize_operator(operator),
            value=value,
        )
        return replace(self, conditions=self.conditions + (condition,))

    def order(self, field: str, direction: str = "ASC") -> QueryState:
        """Return a state whose sort directive replaces any previous one."""
        order_by = OrderBy(
            field=_field_name(field, "ORDER BY"),
            direction=normalize_direction(direction),
        )
        return replace(self, order_by=order_by)
