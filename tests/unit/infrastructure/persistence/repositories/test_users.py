"""Tests for SqlUserRepository — row mapping and email uniqueness checks."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.domain.errors import ConflictError, ErrorCode, RepositoryError, ValidationFailedError
from src.domain.models.enums import UserRole
from src.domain.models.users import UserCreate
from src.infrastructure.persistence.executor import QueryResult
from src.infrastructure.persistence.repositories.users import SqlUserRepository, _row_to_user


def _user_row(**overrides):
    defaults = {
        "id": "u1",
        "email": "ada@example.com",
        "name": "Ada",
        "role": "admin",
        "active": True,
        "bio": None,
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2025, 1, 2, tzinfo=timezone.utc),
    }
    defaults.update(overrides)
    return defaults


def _executor(*results):
    executor = AsyncMock()
    executor.execute.side_effect = list(results)
    return executor


# --- _row_to_user mapping ---

def test_row_to_user_maps_role_enum():
    assert _row_to_user(_user_row()).role == UserRole.ADMIN


def test_row_to_user_stringifies_uuid_id():
    uid = uuid4()
    assert _row_to_user(_user_row(id=uid)).id == str(uid)


def test_row_to_user_tolerates_null_role_and_active():
    user = _row_to_user(_user_row(role=None, active=None))
    assert user.role == UserRole.VIEWER
    assert user.active is True


def test_row_to_user_parses_iso_timestamps():
    user = _row_to_user(_user_row(created_at="2025-03-04T05:06:07+00:00"))
    assert user.created_at == datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


def test_row_to_user_preserves_none_bio():
    assert _row_to_user(_user_row(bio=None)).bio is None


# --- find_by_email ---

async def test_find_by_email_is_case_insensitive_and_active_only():
    executor = _executor(QueryResult(rows=[_user_row()], row_count=1))
    user = await SqlUserRepository(executor).find_by_email("ADA@example.com")
    assert user.email == "ada@example.com"
    sql, params = executor.execute.await_args.args
    assert "LOWER(email) = LOWER($1)" in sql
    assert "active = true" in sql
    assert params == ["ADA@example.com"]


async def test_find_by_email_returns_none_when_missing():
    executor = _executor(QueryResult())
    assert await SqlUserRepository(executor).find_by_email("x@example.com") is None


async def test_find_by_email_wraps_failure():
    executor = _executor(RuntimeError("boom"))
    with pytest.raises(RepositoryError) as info:
        await SqlUserRepository(executor).find_by_email("x@example.com")
    assert info.value.code == ErrorCode.FETCH_FAILED


# --- create ---

async def test_create_checks_email_then_inserts():
    executor = _executor(QueryResult(), QueryResult(rows=[_user_row()], row_count=1))
    user = await SqlUserRepository(executor).create(
        UserCreate(email="Ada@Example.com", name="Ada", role=UserRole.ADMIN)
    )
    assert user.id == "u1"
    insert_sql, insert_params = executor.execute.await_args_list[1].args
    assert insert_sql.startswith("INSERT INTO users (email, name, role, created_at, updated_at)")
    assert insert_params == ["ada@example.com", "Ada", UserRole.ADMIN]


async def test_create_rejects_taken_email():
    executor = _executor(QueryResult(rows=[_user_row()], row_count=1))
    with pytest.raises(ConflictError) as info:
        await SqlUserRepository(executor).create({"email": "ada@example.com", "name": "Ada"})
    assert info.value.code == ErrorCode.EMAIL_ALREADY_EXISTS
    assert executor.execute.await_count == 1


async def test_create_rejects_unknown_fields():
    executor = _executor()
    with pytest.raises(RepositoryError) as info:
        await SqlUserRepository(executor).create({"email": "a@b.co", "name": "A", "is_admin": True})
    assert info.value.code == ErrorCode.VALIDATION_FAILED
    executor.execute.assert_not_awaited()


# --- update ---

async def test_update_allows_keeping_own_email():
    executor = _executor(
        QueryResult(rows=[_user_row(id="u1")], row_count=1),
        QueryResult(rows=[_user_row(name="Ada L.")], row_count=1),
    )
    user = await SqlUserRepository(executor).update("u1", {"email": "ada@example.com", "name": "Ada L."})
    assert user.name == "Ada L."


async def test_update_allows_own_email_with_uppercase_uuid():
    uid = uuid4()
    executor = _executor(
        QueryResult(rows=[_user_row(id=uid)], row_count=1),
        QueryResult(rows=[_user_row(id=uid)], row_count=1),
    )
    user = await SqlUserRepository(executor).update(str(uid).upper(), {"email": "ada@example.com"})
    assert user.id == str(uid)
    assert executor.execute.await_count == 2


async def test_update_rejects_null_for_required_columns():
    executor = _executor()
    with pytest.raises(ValidationFailedError):
        await SqlUserRepository(executor).update("u1", {"name": None, "role": None, "email": None})
    executor.execute.assert_not_awaited()


async def test_update_allows_clearing_bio():
    executor = _executor(QueryResult(rows=[_user_row()], row_count=1))
    await SqlUserRepository(executor).update("u1", {"bio": None})
    sql, params = executor.execute.await_args.args
    assert sql.startswith("UPDATE users SET bio = $1, updated_at = NOW()")
    assert params == [None, "u1"]


async def test_update_rejects_email_owned_by_someone_else():
    executor = _executor(QueryResult(rows=[_user_row(id="u2")], row_count=1))
    with pytest.raises(ConflictError):
        await SqlUserRepository(executor).update("u1", {"email": "ada@example.com"})


async def test_update_without_email_skips_uniqueness_check():
    executor = _executor(QueryResult(rows=[_user_row()], row_count=1))
    await SqlUserRepository(executor).update("u1", {"name": "Ada"})
    assert executor.execute.await_count == 1


async def test_update_missing_user_returns_none():
    executor = _executor(QueryResult())
    assert await SqlUserRepository(executor).update("nope", {"name": "Ada"}) is None


# --- inherited behaviour ---

async def test_soft_delete_targets_users_table():
    executor = _executor(QueryResult(row_count=1))
    assert await SqlUserRepository(executor).soft_delete("u1") is True
    sql, _ = executor.execute.await_args.args
    assert sql.startswith("UPDATE users SET active = $1")
