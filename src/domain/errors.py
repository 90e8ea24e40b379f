"""Domain error taxonomy for the persistence layer.

Every surfaced error carries a human-readable message, a machine-readable
code and (optionally) the underlying cause.  Raw driver exceptions never
reach callers directly; they are chained as ``cause`` / ``__cause__``.

Not-found is deliberately absent: lookups return None and deletes return
False instead of raising.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    FETCH_FAILED = "FETCH_FAILED"
    CREATE_FAILED = "CREATE_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    BULK_CREATE_FAILED = "BULK_CREATE_FAILED"
    MIGRATION_FAILED = "MIGRATION_FAILED"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    UNEXPECTED_RESULT = "UNEXPECTED_RESULT"


class RepositoryError(Exception):
    """Base class for all persistence-layer errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        code = self.code.value if isinstance(self.code, ErrorCode) else self.code
        payload: dict[str, Any] = {"message": self.message, "code": code}
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class ValidationFailedError(RepositoryError):
    """Malformed input, detected before any statement is issued."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, ErrorCode.VALIDATION_FAILED, cause)


class ConflictError(RepositoryError):
    """A uniqueness pre-check found an existing row."""


class UnexpectedResultError(RepositoryError):
    """The store answered, but not with the shape the statement guarantees."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.UNEXPECTED_RESULT)


class MigrationError(RepositoryError):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, ErrorCode.MIGRATION_FAILED, cause)


class ConnectionFailedError(RepositoryError):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, ErrorCode.CONNECTION_FAILED, cause)
