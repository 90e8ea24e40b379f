"""Ledger-tracked schema migrations.

Each migration is an SQL body identified by a unique version string.  The
ledger table records which versions have been applied; it is append-only
and a version appears in it at most once.

A migration body and its ledger row are written in the same transaction,
so a version is either fully applied (schema change + ledger row) or not
at all.  Re-running an applied version is a no-op.

Usage:
    runner = MigrationRunner(executor)
    await runner.create_ledger_table()
    await runner.run_migration("ALTER TABLE users ADD COLUMN bio TEXT", "0003_user_bio")

or, for a directory of ``<version>.sql`` files applied in lexical order:
    await runner.run_directory("migrations")

A body may hold several statements; it runs as one script on the
transaction's connection.
"""

from __future__ import annotations

import logging
from pathlib import Path

from src.domain.errors import MigrationError, ValidationFailedError
from src.domain.models.entities import coerce_datetime
from src.domain.models.migrations import MigrationRecord
from src.infrastructure.persistence.clauses import validate_identifier
from src.infrastructure.persistence.executor import QueryExecutor

logger = logging.getLogger(__name__)


class MigrationRunner:
    def __init__(self, executor: QueryExecutor, ledger_table: str = "migrations") -> None:
        self._executor = executor
        self.ledger_table = validate_identifier(ledger_table, "ledger table")

    async def create_ledger_table(self) -> None:
        sql = (
            f"CREATE TABLE IF NOT EXISTS {self.ledger_table} ("
            "id SERIAL PRIMARY KEY, "
            "version VARCHAR(255) UNIQUE NOT NULL, "
            "applied_at TIMESTAMP DEFAULT NOW())"
        )
        try:
            await self._executor.execute(sql)
        except Exception as exc:
            logger.error("Failed to create migration ledger %s: %s", self.ledger_table, exc)
            raise MigrationError("Could not create migration ledger", exc) from exc

    async def is_applied(self, version: str) -> bool:
        try:
            result = await self._executor.execute(
                f"SELECT version FROM {self.ledger_table} WHERE version = $1", [version]
            )
        except Exception as exc:
            logger.error("Failed to read migration ledger for %s: %s", version, exc)
            raise MigrationError(f"Could not check migration {version}", exc) from exc
        return bool(result.rows)

    async def run_migration(self, sql: str, version: str) -> bool:
        """Apply ``sql`` as ``version`` unless the ledger already has it.

        Returns True if the migration ran, False if it was already applied.
        Raises MigrationError (after rolling back) if anything fails.
        """
        if not version or not version.strip():
            raise ValidationFailedError("Migration version cannot be empty")
        if not sql or not sql.strip():
            raise ValidationFailedError(f"Migration {version} has an empty body")

        if await self.is_applied(version):
            logger.info("Migration already applied: %s", version)
            return False

        try:
            await self._executor.begin()
        except Exception as exc:
            logger.error("Migration %s failed to open a transaction: %s", version, exc)
            raise MigrationError(f"Migration {version} failed", exc) from exc

        try:
            await self._executor.execute_script(sql)
            await self._executor.execute(
                f"INSERT INTO {self.ledger_table} (version, applied_at) VALUES ($1, NOW())",
                [version],
            )
            await self._executor.commit()
        except Exception as exc:
            try:
                await self._executor.rollback()
            except Exception:
                logger.error("Rollback failed for migration %s", version, exc_info=True)
            logger.error("Migration %s failed: %s", version, exc)
            raise MigrationError(f"Migration {version} failed", exc) from exc

        logger.info("Migration applied successfully: %s", version)
        return True

    async def get_applied(self) -> list[MigrationRecord]:
        """Ledger rows ordered by application time, oldest first."""
        try:
            result = await self._executor.execute(
                f"SELECT version, applied_at FROM {self.ledger_table} ORDER BY applied_at ASC, id ASC"
            )
        except Exception as exc:
            logger.error("Failed to read migration ledger: %s", exc)
            raise MigrationError("Could not read migration ledger", exc) from exc
        return [
            MigrationRecord(version=row["version"], applied_at=coerce_datetime(row["applied_at"]))
            for row in result.rows
        ]

    async def get_applied_versions(self) -> list[str]:
        return [record.version for record in await self.get_applied()]

    async def run_directory(self, path: str | Path) -> list[str]:
        """Apply every ``*.sql`` file in ``path`` in lexical filename order.

        The file stem is the version.  Returns the versions applied by this
        call; already-applied files are skipped.  Stops at the first failure.
        """
        directory = Path(path)
        if not directory.is_dir():
            raise MigrationError(f"Migration directory not found: {directory}")

        await self.create_ledger_table()
        applied: list[str] = []
        for file in sorted(directory.glob("*.sql")):
            if await self.run_migration(file.read_text(encoding="utf-8"), file.stem):
                applied.append(file.stem)
        return applied
