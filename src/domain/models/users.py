"""User entity and its create/update payloads.

UserCreate and UserUpdate are the CreateSpec / UpdatePartial for the users
table.  Only fields the caller actually set are written: the repository
dumps them with exclude_unset=True, so an omitted field leaves the column
untouched while an explicit None writes NULL.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .entities import Entity
from .enums import UserRole

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _check_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError(f"Invalid email format: {value!r}")
    return value.lower()


class User(Entity):
    email: str
    name: str
    role: UserRole = UserRole.VIEWER
    active: bool = True
    bio: str | None = None


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    name: str = Field(min_length=1)
    role: UserRole = UserRole.VIEWER
    bio: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _check_email(value)


class UserUpdate(BaseModel):
    """Every field optional; absent fields are never written.

    Only bio may be cleared with an explicit None; the other columns are
    NOT NULL.
    """

    model_config = ConfigDict(extra="forbid")

    email: str | None = None
    name: str | None = Field(default=None, min_length=1)
    role: UserRole | None = None
    bio: str | None = None

    @field_validator("email", "name", "role", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return None if value is None else _check_email(value)
