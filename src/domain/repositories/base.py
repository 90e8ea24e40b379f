"""Generic repository base interface.

Repository[T, C, U] is the root abstraction for all data-access interfaces
in this domain layer.  Concrete implementations live in
src/infrastructure/persistence/ and are wired at the application boundary
via dependency injection.

Design notes:
  - All methods are async to accommodate async database drivers (asyncpg / SQLAlchemy async).
  - T is the domain entity type (never a raw row).
  - C is the create payload (CreateSpec), U the partial update payload
    (UpdatePartial).  Either may also be passed as a plain mapping.
  - Not-found is a return value (None / False), never an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")
C = TypeVar("C", bound=BaseModel)
U = TypeVar("U", bound=BaseModel)

Conditions = Mapping[str, Any]


class Repository(ABC, Generic[T, C, U]):
    """Abstract CRUD interface for a domain entity."""

    @abstractmethod
    async def find_all(self, conditions: Conditions | None = None) -> list[T]:
        """Return every entity matching all equality conditions (None values ignored)."""

    @abstractmethod
    async def find_by_id(self, id: str) -> T | None:
        """Return the entity with the given primary key, or None if not found."""

    @abstractmethod
    async def create(self, data: C | Mapping[str, Any]) -> T:
        """Persist a new entity and return it with store-generated fields populated."""

    @abstractmethod
    async def update(self, id: str, data: U | Mapping[str, Any]) -> T | None:
        """Write only the supplied fields; return the updated entity or None if absent."""

    @abstractmethod
    async def delete(self, id: str) -> bool:
        """Remove the row; return whether a row was actually removed."""

    @abstractmethod
    async def soft_delete(self, id: str) -> bool:
        """Mark the row inactive; return whether a row was affected."""

    @abstractmethod
    async def bulk_create(self, items: Sequence[C | Mapping[str, Any]]) -> list[T]:
        """Create all items in one transaction, or none of them."""
