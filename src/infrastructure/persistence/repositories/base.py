"""Generic SQL implementation of Repository[T, C, U].

SqlRepository turns typed create/update payloads into parameterized SQL via
the clause builder and runs it through an injected QueryExecutor.  The only
table-specific piece is the row mapper, passed in at construction:

    repo = SqlRepository(executor, "tags", lambda row: Tag(**row))

Every statement is a single atomic call except bulk_create(), which brackets
its inserts in one transaction.  Execution failures are re-raised as
RepositoryError with an operation-specific code and the original exception
as the cause.  Not-found is reported through None / False.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.domain.errors import (
    ErrorCode,
    RepositoryError,
    UnexpectedResultError,
    ValidationFailedError,
)
from src.domain.models.entities import MANAGED_COLUMNS, Row
from src.domain.models.enums import SortDirection
from src.domain.repositories.base import C, Conditions, Repository, T, U
from src.infrastructure.persistence.clauses import (
    as_mapping,
    build_insert,
    build_update,
    build_where,
    validate_identifier,
)
from src.infrastructure.persistence.executor import QueryExecutor
from src.infrastructure.persistence.query_builder import QueryBuilder

logger = logging.getLogger(__name__)

RowMapper = Callable[[Row], T]
CreateListener = Callable[[T], Awaitable[None]]

M = TypeVar("M", bound=BaseModel)


class SqlRepository(Repository[T, C, U]):
    def __init__(
        self,
        executor: QueryExecutor,
        table: str,
        row_mapper: RowMapper[T],
        *,
        create_schema: type[C] | None = None,
        update_schema: type[U] | None = None,
    ) -> None:
        self._executor = executor
        self.table = validate_identifier(table, "table")
        self._row_mapper = row_mapper
        self._create_schema = create_schema
        self._update_schema = update_schema
        self._listeners: list[CreateListener[T]] = []
        # Entities created inside bulk_create(); announced only after commit.
        self._deferred: list[T] | None = None

    # --- reads ---

    async def find_all(self, conditions: Conditions | None = None) -> list[T]:
        where = build_where(conditions or {})
        sql = f"SELECT * FROM {self.table}"
        if where.text:
            sql = f"{sql} {where.text}"
        try:
            result = await self._executor.execute(sql, where.params)
            return [self._row_mapper(row) for row in result.rows]
        except Exception as exc:
            logger.error("Failed to find all %s: %s", self.table, exc)
            raise RepositoryError(f"Could not retrieve {self.table}", ErrorCode.FETCH_FAILED, exc) from exc

    async def find_by_id(self, id: str) -> T | None:
        try:
            result = await self._executor.execute(
                f"SELECT * FROM {self.table} WHERE id = $1", [id]
            )
            return self._row_mapper(result.rows[0]) if result.rows else None
        except Exception as exc:
            logger.error("Failed to find %s by id %s: %s", self.table, id, exc)
            raise RepositoryError(f"Could not retrieve {self.table}", ErrorCode.FETCH_FAILED, exc) from exc

    async def find_page(
        self,
        conditions: Conditions | None = None,
        limit: int = 50,
        offset: int = 0,
        order_by: str = "created_at",
        direction: SortDirection | str = SortDirection.DESC,
    ) -> list[T]:
        """Return one page of matching entities, newest first by default."""
        query = self._filtered_query(conditions).order_by(order_by, direction).limit(limit).offset(offset)
        sql, params = query.build()
        try:
            result = await self._executor.execute(sql, params)
            return [self._row_mapper(row) for row in result.rows]
        except Exception as exc:
            logger.error("Failed to page %s: %s", self.table, exc)
            raise RepositoryError(f"Could not retrieve {self.table}", ErrorCode.FETCH_FAILED, exc) from exc

    async def count(self, conditions: Conditions | None = None) -> int:
        sql, params = self._filtered_query(conditions).select(["COUNT(*) AS total"]).build()
        try:
            result = await self._executor.execute(sql, params)
            return int(result.rows[0]["total"]) if result.rows else 0
        except Exception as exc:
            logger.error("Failed to count %s: %s", self.table, exc)
            raise RepositoryError(f"Could not count {self.table}", ErrorCode.FETCH_FAILED, exc) from exc

    async def exists(self, conditions: Conditions) -> bool:
        sql, params = self._filtered_query(conditions).select(["1"]).limit(1).build()
        try:
            result = await self._executor.execute(sql, params)
        except Exception as exc:
            logger.error("Failed to check %s existence: %s", self.table, exc)
            raise RepositoryError(f"Could not retrieve {self.table}", ErrorCode.FETCH_FAILED, exc) from exc
        return bool(result.rows)

    # --- writes ---

    async def create(self, data: C | Mapping[str, Any]) -> T:
        payload = self._payload(self._validate(data, self._create_schema, "create"))
        insert = build_insert(payload)
        columns = ", ".join(filter(None, [insert.columns, "created_at, updated_at"]))
        values = ", ".join(filter(None, [insert.placeholders, "NOW(), NOW()"]))
        sql = f"INSERT INTO {self.table} ({columns}) VALUES ({values}) RETURNING *"
        try:
            result = await self._executor.execute(sql, insert.values)
            if not result.rows:
                raise UnexpectedResultError(f"INSERT into {self.table} returned no row")
            entity = self._row_mapper(result.rows[0])
        except Exception as exc:
            logger.error("Failed to create %s: %s", self.table, exc)
            raise RepositoryError(f"Could not create {self.table}", ErrorCode.CREATE_FAILED, exc) from exc

        if self._deferred is not None:
            self._deferred.append(entity)
        else:
            await self._notify(entity)
        return entity

    async def update(self, id: str, data: U | Mapping[str, Any]) -> T | None:
        payload = self._payload(self._validate(data, self._update_schema, "update"))
        update = build_update(payload)
        sql = (
            f"UPDATE {self.table} SET {update.set_clause} "
            f"WHERE id = ${len(update.params) + 1} RETURNING *"
        )
        try:
            result = await self._executor.execute(sql, [*update.params, id])
            return self._row_mapper(result.rows[0]) if result.rows else None
        except Exception as exc:
            logger.error("Failed to update %s %s: %s", self.table, id, exc)
            raise RepositoryError(f"Could not update {self.table}", ErrorCode.UPDATE_FAILED, exc) from exc

    async def delete(self, id: str) -> bool:
        try:
            result = await self._executor.execute(f"DELETE FROM {self.table} WHERE id = $1", [id])
        except Exception as exc:
            logger.error("Failed to delete %s %s: %s", self.table, id, exc)
            raise RepositoryError(f"Could not delete {self.table}", ErrorCode.DELETE_FAILED, exc) from exc
        return result.row_count > 0

    async def soft_delete(self, id: str) -> bool:
        update = build_update({"active": False})
        sql = f"UPDATE {self.table} SET {update.set_clause} WHERE id = $2"
        try:
            result = await self._executor.execute(sql, [*update.params, id])
        except Exception as exc:
            logger.error("Failed to soft delete %s %s: %s", self.table, id, exc)
            raise RepositoryError(f"Could not delete {self.table}", ErrorCode.DELETE_FAILED, exc) from exc
        return result.row_count > 0

    async def bulk_create(self, items: Sequence[C | Mapping[str, Any]]) -> list[T]:
        """Create every item or none of them.

        Inserts run strictly one after another inside a single transaction.
        Any failure (validation, conflict or execution) rolls the whole batch
        back and surfaces as one BULK_CREATE_FAILED error.  Create listeners
        fire only after the commit succeeds.

        The deferred-listener buffer lives on the instance, so one repository
        must not run two bulk_create calls concurrently.
        """
        items = list(items)
        if not items:
            return []

        try:
            await self._executor.begin()
        except Exception as exc:
            logger.error("Failed to bulk create %s (count=%d): %s", self.table, len(items), exc)
            raise RepositoryError(
                f"Could not bulk create {self.table}", ErrorCode.BULK_CREATE_FAILED, exc
            ) from exc

        self._deferred = []
        created: list[T] = []
        try:
            for item in items:
                created.append(await self.create(item))
            await self._executor.commit()
        except Exception as exc:
            self._deferred = None
            await self._rollback_quietly()
            logger.error("Failed to bulk create %s (count=%d): %s", self.table, len(items), exc)
            raise RepositoryError(
                f"Could not bulk create {self.table}", ErrorCode.BULK_CREATE_FAILED, exc
            ) from exc

        deferred, self._deferred = self._deferred, None
        for entity in deferred:
            await self._notify(entity)
        return created

    # --- listeners ---

    def add_listener(self, listener: CreateListener[T]) -> None:
        """Register an async callback run after each successful create.

        Listener failures are logged and never fail the create itself.
        """
        self._listeners.append(listener)

    async def _notify(self, entity: T) -> None:
        for listener in self._listeners:
            try:
                await listener(entity)
            except Exception:
                logger.warning("Create listener failed for %s", self.table, exc_info=True)

    # --- helpers ---

    def _filtered_query(self, conditions: Conditions | None) -> QueryBuilder:
        query = QueryBuilder().from_(self.table)
        for column, value in (conditions or {}).items():
            if value is not None:
                query.where(f"{column} = ?", value)
        return query

    def _validate(
        self,
        data: M | Mapping[str, Any],
        schema: type[M] | None,
        operation: str,
    ) -> M | Mapping[str, Any]:
        """Run plain-mapping payloads through the schema, before any SQL is issued."""
        if schema is None or isinstance(data, BaseModel):
            return data
        try:
            return schema.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationFailedError(
                f"Invalid {operation} payload for {self.table}: {exc.error_count()} error(s)",
                exc,
            ) from exc

    @staticmethod
    def _payload(data: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
        # id and the timestamps belong to the store.
        return {k: v for k, v in as_mapping(data).items() if k not in MANAGED_COLUMNS}

    async def _rollback_quietly(self) -> None:
        try:
            await self._executor.rollback()
        except Exception:
            logger.error("Rollback failed for %s", self.table, exc_info=True)
