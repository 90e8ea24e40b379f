"""Fluent SELECT builder with positional parameters.

Usage:
    sql, params = (
        create_query_builder()
        .select(["u.*", "p.bio"])
        .from_("users u")
        .left_join("profiles p", "u.id = p.user_id")
        .where("u.active = true")
        .where("u.role = ?", "admin")
        .order_by("u.created_at", "DESC")
        .limit(20)
        .offset(40)
        .build()
    )

Table, field and join/condition text is interpolated verbatim and must be
static, code-defined SQL.  Only values passed to where() are bound.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Sequence

from src.domain.models.enums import SortDirection

_NO_VALUE = object()


class BuiltQuery(NamedTuple):
    sql: str
    params: list[Any]


def _non_negative_int(value: int | None, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


class QueryBuilder:
    """Mutable, chainable SELECT builder.

    Every configuration call mutates this instance and returns it.  build()
    clears nothing, so calling it repeatedly yields the same statement.

    LIMIT and OFFSET are emitted only for positive values: None and 0 both
    mean "unset".  ``limit(0)`` therefore does NOT produce ``LIMIT 0``;
    callers that want an empty page should not query at all.
    """

    def __init__(self) -> None:
        self._fields: list[str] = ["*"]
        self._table = ""
        self._joins: list[str] = []
        self._conditions: list[str] = []
        self._order_by: list[str] = []
        self._limit: int | None = None
        self._offset: int | None = None
        self._params: list[Any] = []

    def select(self, fields: Sequence[str]) -> QueryBuilder:
        if isinstance(fields, str):
            fields = [fields]
        self._fields = list(fields) or ["*"]
        return self

    def from_(self, table: str) -> QueryBuilder:
        self._table = table
        return self

    def join(self, table: str, condition: str) -> QueryBuilder:
        self._joins.append(f"INNER JOIN {table} ON {condition}")
        return self

    def left_join(self, table: str, condition: str) -> QueryBuilder:
        self._joins.append(f"LEFT JOIN {table} ON {condition}")
        return self

    def where(self, condition: str, value: Any = _NO_VALUE) -> QueryBuilder:
        """Add an AND-ed predicate.

        With a value, the first ``?`` in ``condition`` becomes the next
        positional placeholder and the value is bound to it (None included).
        Without one, ``condition`` is used verbatim.
        """
        if value is _NO_VALUE:
            self._conditions.append(condition)
            return self

        if "?" not in condition:
            raise ValueError(f"Condition {condition!r} has no '?' placeholder for its value")
        self._params.append(value)
        self._conditions.append(condition.replace("?", f"${len(self._params)}", 1))
        return self

    def order_by(self, field: str, direction: SortDirection | str = SortDirection.ASC) -> QueryBuilder:
        self._order_by.append(f"{field} {SortDirection.parse(direction).value}")
        return self

    def limit(self, count: int | None) -> QueryBuilder:
        self._limit = _non_negative_int(count, "limit")
        return self

    def offset(self, count: int | None) -> QueryBuilder:
        self._offset = _non_negative_int(count, "offset")
        return self

    def build(self) -> BuiltQuery:
        if not self._table:
            raise ValueError("No table to select from; call from_() before build()")

        parts = [f"SELECT {', '.join(self._fields)} FROM {self._table}"]
        if self._joins:
            parts.append(" ".join(self._joins))
        if self._conditions:
            parts.append("WHERE " + " AND ".join(self._conditions))
        if self._order_by:
            parts.append("ORDER BY " + ", ".join(self._order_by))
        if self._limit:
            parts.append(f"LIMIT {self._limit}")
        if self._offset:
            parts.append(f"OFFSET {self._offset}")

        return BuiltQuery(" ".join(parts), list(self._params))


def create_query_builder() -> QueryBuilder:
    return QueryBuilder()
