"""Concrete SQL repository implementations.

Exports the generic SqlRepository, the table-specific repositories and the
get_repositories() factory function for wiring at the application boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.infrastructure.persistence.executor import QueryExecutor
from src.infrastructure.persistence.migrations import MigrationRunner

from .base import CreateListener, RowMapper, SqlRepository
from .users import SqlUserRepository


@dataclass
class Repositories:
    """All repository instances bound to a single QueryExecutor."""

    users: SqlUserRepository
    migrations: MigrationRunner


def get_repositories(executor: QueryExecutor) -> Repositories:
    """Construct all repositories bound to the given executor.

        manager = DatabaseConnectionManager()
        await manager.initialize()
        repos = get_repositories(manager.executor())
        user = await repos.users.find_by_id(user_id)
    """
    return Repositories(
        users=SqlUserRepository(executor),
        migrations=MigrationRunner(executor),
    )


__all__ = [
    "CreateListener",
    "RowMapper",
    "SqlRepository",
    "SqlUserRepository",
    "Repositories",
    "get_repositories",
]
