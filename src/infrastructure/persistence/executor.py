"""Execution collaborator: runs positional-placeholder SQL against the store.

Every statement the clause builder, query builder, repositories and the
migration runner produce uses PostgreSQL-style positional placeholders
($1, $2, ...) with an ordered parameter list.  The asyncpg dialect speaks
that paramstyle natively, so SqlAlchemyExecutor hands the statement text to
the driver unchanged and the values travel as bound parameters.  Literal
text such as ``'costs $5'`` or ``'note :draft'`` is never rewritten.

Multi-statement scripts (migration bodies) go through execute_script(),
which uses asyncpg's simple-query protocol instead of a prepared statement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction


@dataclass(frozen=True)
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0


class QueryExecutor(Protocol):
    """
    Contract between the persistence layer and whatever actually talks to
    the database.

    execute() and execute_script() run inside the open transaction when one
    exists; otherwise each call commits on its own.  Transactions do not nest.
    """

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> QueryResult:
        """Run one statement and return its rows (if any) and affected row count."""
        ...

    async def execute_script(self, sql: str) -> None:
        """Run unparameterized SQL that may hold several statements."""
        ...

    async def begin(self) -> None:
        """Open a transaction."""
        ...

    async def commit(self) -> None:
        """Commit the open transaction."""
        ...

    async def rollback(self) -> None:
        """Roll back the open transaction."""
        ...


class SqlAlchemyExecutor:
    """
    QueryExecutor over a SQLAlchemy AsyncEngine using the asyncpg driver.

    Outside a transaction each call borrows a pooled connection and commits
    on exit.  Between begin() and commit()/rollback() one connection is held
    and every statement runs on it in order.

    Usage:
        executor = SqlAlchemyExecutor(engine)
        await executor.begin()
        try:
            await executor.execute("INSERT INTO t (a) VALUES ($1)", [1])
            await executor.commit()
        except Exception:
            await executor.rollback()
            raise
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._conn: AsyncConnection | None = None
        self._tx: AsyncTransaction | None = None

    @property
    def in_transaction(self) -> bool:
        return self._conn is not None

    async def begin(self) -> None:
        if self._conn is not None:
            raise RuntimeError("A transaction is already open; nested transactions are not allowed")
        conn = await self.engine.connect()
        try:
            self._tx = await conn.begin()
        except Exception:
            await conn.close()
            raise
        self._conn = conn

    async def commit(self) -> None:
        conn, tx = self._detach()
        try:
            await tx.commit()
        finally:
            await conn.close()

    async def rollback(self) -> None:
        conn, tx = self._detach()
        try:
            await tx.rollback()
        finally:
            await conn.close()

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> QueryResult:
        if self._conn is not None:
            return await self._run(self._conn, sql, params)
        async with self.engine.begin() as conn:
            return await self._run(conn, sql, params)

    async def execute_script(self, sql: str) -> None:
        if self._conn is not None:
            await self._run_script(self._conn, sql)
            return
        async with self.engine.begin() as conn:
            await self._run_script(conn, sql)

    def _detach(self) -> tuple[AsyncConnection, AsyncTransaction]:
        if self._conn is None or self._tx is None:
            raise RuntimeError("No transaction is open")
        conn, tx = self._conn, self._tx
        self._conn = None
        self._tx = None
        return conn, tx

    @staticmethod
    async def _run(
        conn: AsyncConnection, sql: str, params: Sequence[Any] | None
    ) -> QueryResult:
        if params:
            result = await conn.exec_driver_sql(sql, tuple(params))
        else:
            result = await conn.exec_driver_sql(sql)

        rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
        row_count = result.rowcount
        if row_count is None or row_count < 0:
            row_count = len(rows)
        return QueryResult(rows=rows, row_count=int(row_count))

    @staticmethod
    async def _run_script(conn: AsyncConnection, sql: str) -> None:
        # The asyncpg adapter opens its transaction on the first statement it
        # sees; issue one so the script lands inside that transaction.
        await conn.exec_driver_sql("SELECT 1")
        raw = await conn.get_raw_connection()
        await raw.driver_connection.execute(sql)
