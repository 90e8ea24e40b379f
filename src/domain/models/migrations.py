"""Migration ledger record."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MigrationRecord(BaseModel):
    """One applied schema change.  The ledger is append-only and a version
    appears in it at most once."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(min_length=1, max_length=255)
    applied_at: datetime
