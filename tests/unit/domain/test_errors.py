"""Tests for src/domain/errors.py."""

from src.domain.errors import (
    ConflictError,
    ErrorCode,
    MigrationError,
    RepositoryError,
    UnexpectedResultError,
    ValidationFailedError,
)


def test_repository_error_carries_message_code_and_cause():
    cause = RuntimeError("driver")
    error = RepositoryError("Could not create users", ErrorCode.CREATE_FAILED, cause)
    assert str(error) == "Could not create users"
    assert error.code == ErrorCode.CREATE_FAILED
    assert error.cause is cause


def test_error_code_is_string_comparable():
    assert ErrorCode.FETCH_FAILED == "FETCH_FAILED"


def test_to_dict_without_cause():
    error = RepositoryError("Could not delete users", ErrorCode.DELETE_FAILED)
    assert error.to_dict() == {"message": "Could not delete users", "code": "DELETE_FAILED"}


def test_to_dict_includes_cause_repr():
    error = MigrationError("Migration 0001 failed", ValueError("bad sql"))
    assert error.to_dict()["cause"] == "ValueError('bad sql')"


def test_to_dict_accepts_free_form_code():
    assert RepositoryError("x", "CUSTOM").to_dict()["code"] == "CUSTOM"


def test_subclasses_fix_their_codes():
    assert ValidationFailedError("bad").code == ErrorCode.VALIDATION_FAILED
    assert UnexpectedResultError("no row").code == ErrorCode.UNEXPECTED_RESULT
    assert MigrationError("failed").code == ErrorCode.MIGRATION_FAILED


def test_conflict_error_is_repository_error():
    error = ConflictError("Email already exists", ErrorCode.EMAIL_ALREADY_EXISTS)
    assert isinstance(error, RepositoryError)
