"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .entities import MANAGED_COLUMNS, Entity, Row, Scalar, coerce_datetime, coerce_id
from .enums import SortDirection, UserRole
from .migrations import MigrationRecord
from .users import User, UserCreate, UserUpdate

__all__ = [
    # enums
    "SortDirection",
    "UserRole",
    # entities
    "Entity",
    "Row",
    "Scalar",
    "MANAGED_COLUMNS",
    "coerce_datetime",
    "coerce_id",
    # users
    "User",
    "UserCreate",
    "UserUpdate",
    # migrations
    "MigrationRecord",
]
