"""Tests for src/domain/models/entities.py."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from src.domain.models.entities import MANAGED_COLUMNS, coerce_datetime, coerce_id


def test_managed_columns_cover_id_and_timestamps():
    assert MANAGED_COLUMNS == {"id", "created_at", "updated_at"}


def test_coerce_id_accepts_uuid_and_int():
    uid = uuid4()
    assert coerce_id(uid) == str(uid)
    assert coerce_id(42) == "42"


def test_coerce_id_rejects_none():
    with pytest.raises(ValueError):
        coerce_id(None)


def test_coerce_datetime_passes_datetime_through():
    now = datetime.now(timezone.utc)
    assert coerce_datetime(now) is now


def test_coerce_datetime_parses_iso_text():
    assert coerce_datetime("2025-01-01T00:00:00") == datetime(2025, 1, 1)


def test_coerce_datetime_rejects_other_types():
    with pytest.raises(ValueError):
        coerce_datetime(12345)
