"""Parameterized clause construction for WHERE / INSERT / UPDATE fragments.

Pure functions, no I/O.  Each returns SQL text using positional
placeholders ($1, $2, ...) and the ordered list of values those
placeholders bind.  The number of placeholders always equals the number
of values and the numbering is contiguous from ``start``.

SECURITY CONTRACT
Values only ever reach SQL through placeholders.  Column names are
interpolated as-is and are NOT checked against any schema: they MUST be
static, code-defined names, never user input.  Table names handed to
repositories go through validate_identifier().
"""

from __future__ import annotations

import re
from typing import Any, Mapping, NamedTuple

from pydantic import BaseModel

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# PostgreSQL truncates identifiers longer than NAMEDATALEN - 1.
MAX_IDENTIFIER_LENGTH = 63

TIMESTAMP_COLUMN = "updated_at"


class WhereClause(NamedTuple):
    text: str
    params: list[Any]


class InsertClause(NamedTuple):
    columns: str
    placeholders: str
    values: list[Any]


class UpdateClause(NamedTuple):
    set_clause: str
    params: list[Any]


def validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Check that a table/column name is a plain SQL identifier.

    This validates format only; it does not make untrusted input safe to
    use as an identifier.

    Example:
        >>> validate_identifier("users", "table")
        'users'
        >>> validate_identifier("users; DROP TABLE users", "table")
        Traceback (most recent call last):
        ValueError: Invalid table 'users; DROP TABLE users': ...
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError(f"{identifier_type} cannot be empty")
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValueError(f"{identifier_type} {name!r} exceeds {MAX_IDENTIFIER_LENGTH} characters")
    return name


def as_mapping(data: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """Fields the caller actually supplied.

    Pydantic payloads contribute only the fields that were explicitly set
    (an explicit None is kept and written as NULL).  Plain mappings
    contribute every key they contain.
    """
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    return dict(data)


def build_where(conditions: BaseModel | Mapping[str, Any], start: int = 1) -> WhereClause:
    """
    Equality-only WHERE clause.  None values are dropped, so a None never
    turns into ``col = NULL``.  Returns ("", []) when nothing remains.

    Example:
        >>> build_where({"role": "admin", "active": True, "bio": None})
        WhereClause(text='WHERE role = $1 AND active = $2', params=['admin', True])
    """
    clauses: list[str] = []
    params: list[Any] = []
    for column, value in as_mapping(conditions).items():
        if value is None:
            continue
        params.append(value)
        clauses.append(f"{column} = ${start + len(params) - 1}")

    if not clauses:
        return WhereClause("", [])
    return WhereClause("WHERE " + " AND ".join(clauses), params)


def build_insert(data: BaseModel | Mapping[str, Any], start: int = 1) -> InsertClause:
    """
    Column list, placeholder list and values for an INSERT, in the
    payload's own order, so values[i] always binds placeholders[i].

    Example:
        >>> build_insert({"email": "a@b.co", "name": "Ada"})
        InsertClause(columns='email, name', placeholders='$1, $2', values=['a@b.co', 'Ada'])
    """
    entries = list(as_mapping(data).items())
    columns = ", ".join(column for column, _ in entries)
    placeholders = ", ".join(f"${start + i}" for i in range(len(entries)))
    values = [value for _, value in entries]
    return InsertClause(columns, placeholders, values)


def build_update(data: BaseModel | Mapping[str, Any], start: int = 1) -> UpdateClause:
    """
    SET clause for a partial update.  Only supplied fields are written and
    ``updated_at = NOW()`` is always appended, so an empty payload still
    yields a valid statement that just advances the timestamp.

    Example:
        >>> build_update({"name": "Ada"})
        UpdateClause(set_clause='name = $1, updated_at = NOW()', params=['Ada'])
        >>> build_update({})
        UpdateClause(set_clause='updated_at = NOW()', params=[])
    """
    assignments: list[str] = []
    params: list[Any] = []
    for column, value in as_mapping(data).items():
        if column == TIMESTAMP_COLUMN:
            continue
        params.append(value)
        assignments.append(f"{column} = ${start + len(params) - 1}")

    assignments.append(f"{TIMESTAMP_COLUMN} = NOW()")
    return UpdateClause(", ".join(assignments), params)
