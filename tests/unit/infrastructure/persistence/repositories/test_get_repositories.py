"""Tests for the get_repositories() DI factory."""

from unittest.mock import AsyncMock

from src.infrastructure.persistence.migrations import MigrationRunner
from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlUserRepository,
    get_repositories,
)


def _repos():
    return get_repositories(AsyncMock())


def test_get_repositories_returns_repositories_instance():
    assert isinstance(_repos(), Repositories)


def test_repositories_users_is_correct_type():
    assert isinstance(_repos().users, SqlUserRepository)


def test_repositories_migrations_is_correct_type():
    assert isinstance(_repos().migrations, MigrationRunner)


def test_repositories_share_one_executor():
    executor = AsyncMock()
    repos = get_repositories(executor)
    assert repos.users._executor is executor
    assert repos.migrations._executor is executor


def test_repositories_dataclass_has_two_fields():
    assert len(Repositories.__dataclass_fields__) == 2
