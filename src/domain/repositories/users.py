"""User repository interface."""

from __future__ import annotations

from abc import abstractmethod

from src.domain.models.users import User, UserCreate, UserUpdate

from .base import Repository


class UserRepository(Repository[User, UserCreate, UserUpdate]):
    """Read/write interface for User entities.

    Email addresses are unique among active users; create() and update()
    raise ConflictError (EMAIL_ALREADY_EXISTS) when the address is taken.
    """

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Return the active user with the given email (case-insensitive), or None."""
