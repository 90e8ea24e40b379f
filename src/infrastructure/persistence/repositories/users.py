"""SQL implementation of UserRepository."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from src.domain.errors import ConflictError, ErrorCode, RepositoryError
from src.domain.models.entities import Row, coerce_datetime, coerce_id
from src.domain.models.enums import UserRole
from src.domain.models.users import User, UserCreate, UserUpdate
from src.domain.repositories.users import UserRepository
from src.infrastructure.persistence.clauses import as_mapping
from src.infrastructure.persistence.executor import QueryExecutor

from .base import SqlRepository

logger = logging.getLogger(__name__)


def _row_to_user(row: Row) -> User:
    role = row.get("role")
    active = row.get("active")
    return User(
        id=coerce_id(row["id"]),
        email=str(row["email"]),
        name=str(row["name"]),
        role=UserRole(role) if role is not None else UserRole.VIEWER,
        active=True if active is None else bool(active),
        bio=row.get("bio"),
        created_at=coerce_datetime(row["created_at"]),
        updated_at=coerce_datetime(row["updated_at"]),
    )


def _same_id(left: Any, right: Any) -> bool:
    """UUID ids compare by value, so case and hyphenation do not matter."""
    try:
        return UUID(str(left)) == UUID(str(right))
    except ValueError:
        return str(left) == str(right)


class SqlUserRepository(SqlRepository[User, UserCreate, UserUpdate], UserRepository):
    def __init__(self, executor: QueryExecutor) -> None:
        super().__init__(
            executor,
            "users",
            _row_to_user,
            create_schema=UserCreate,
            update_schema=UserUpdate,
        )

    async def find_by_email(self, email: str) -> User | None:
        try:
            result = await self._executor.execute(
                "SELECT * FROM users WHERE LOWER(email) = LOWER($1) AND active = true",
                [email],
            )
            return _row_to_user(result.rows[0]) if result.rows else None
        except Exception as exc:
            logger.error("Failed to find users by email: %s", exc)
            raise RepositoryError("Could not retrieve users", ErrorCode.FETCH_FAILED, exc) from exc

    async def create(self, data: UserCreate | Mapping[str, Any]) -> User:
        data = self._validate(data, UserCreate, "create")
        email = as_mapping(data).get("email")
        if email and await self.find_by_email(email) is not None:
            raise ConflictError("Email already exists", ErrorCode.EMAIL_ALREADY_EXISTS)
        return await super().create(data)

    async def update(self, id: str, data: UserUpdate | Mapping[str, Any]) -> User | None:
        data = self._validate(data, UserUpdate, "update")
        email = as_mapping(data).get("email")
        if email:
            existing = await self.find_by_email(email)
            if existing is not None and not _same_id(existing.id, id):
                raise ConflictError("Email already exists", ErrorCode.EMAIL_ALREADY_EXISTS)
        return await super().update(id, data)
