"""Persistence package.

Exports the execution collaborator, the clause and query builders, every
repository implementation, the migration runner and the DI factory.
"""

from src.infrastructure.persistence.clauses import (
    InsertClause,
    UpdateClause,
    WhereClause,
    build_insert,
    build_update,
    build_where,
    validate_identifier,
)
from src.infrastructure.persistence.executor import (
    QueryExecutor,
    QueryResult,
    SqlAlchemyExecutor,
)
from src.infrastructure.persistence.migrations import MigrationRunner
from src.infrastructure.persistence.query_builder import (
    BuiltQuery,
    QueryBuilder,
    create_query_builder,
)
from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlRepository,
    SqlUserRepository,
    get_repositories,
)

__all__ = [
    "InsertClause",
    "UpdateClause",
    "WhereClause",
    "build_insert",
    "build_update",
    "build_where",
    "validate_identifier",
    "QueryExecutor",
    "QueryResult",
    "SqlAlchemyExecutor",
    "MigrationRunner",
    "BuiltQuery",
    "QueryBuilder",
    "create_query_builder",
    "Repositories",
    "SqlRepository",
    "SqlUserRepository",
    "get_repositories",
]
