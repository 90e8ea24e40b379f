"""Tests for src/domain/models/__init__.py — package exports."""

from src.domain.models import __all__ as domain_all
from src.domain.models import (
    Entity,
    MigrationRecord,
    SortDirection,
    User,
    UserCreate,
    UserRole,
    UserUpdate,
)


def test_domain_models_exports_12_names():
    assert len(domain_all) == 12


def test_user_role_importable_from_package():
    assert UserRole.ADMIN == "admin"


def test_sort_direction_importable_from_package():
    assert SortDirection.DESC == "DESC"


def test_user_is_an_entity():
    assert issubclass(User, Entity)


def test_payload_models_importable_from_package():
    assert UserCreate.__name__ == "UserCreate"
    assert UserUpdate.__name__ == "UserUpdate"


def test_migration_record_importable_from_package():
    assert MigrationRecord.__name__ == "MigrationRecord"
