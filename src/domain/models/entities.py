"""Base entity shape shared by every persisted record.

id, created_at and updated_at are owned by the store: the repository
assigns the timestamps server-side with NOW() and strips these keys from
any create/update payload a caller supplies.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict

# A single column value as handed back by the execution collaborator.
Scalar = Union[None, bool, int, float, str, datetime, date, Decimal, UUID]

# An open record: column name -> scalar.
Row = Mapping[str, Scalar]

MANAGED_COLUMNS = frozenset({"id", "created_at", "updated_at"})


class Entity(BaseModel):
    """A persisted record with a string identifier and store-managed timestamps."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime
    updated_at: datetime


def coerce_id(value: Any) -> str:
    """Identifiers come back as UUID, int or str depending on the column type."""
    if value is None:
        raise ValueError("Row has no id")
    return str(value)


def coerce_datetime(value: Any) -> datetime:
    """Timestamps arrive as datetime from asyncpg but as ISO text from some drivers."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise ValueError(f"Cannot interpret {value!r} as a timestamp")
