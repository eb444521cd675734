"""pgshape: allow-listed statement building and cardinality-checked results."""

from .core import (
    CardinalityError,
    ConfigurationError,
    DatabaseConfig,
    DatabaseConnectionError,
    DatabaseService,
    FieldSet,
    HandleClosedError,
    NoOpUpdateError,
    NotFoundError,
    NotReadyError,
    ParameterizedStatement,
    PgShapeError,
    QueryExecutionError,
    QueryResult,
    ReturningColumnError,
    RowsAffected,
    Table,
    TlsPolicy,
    build_insert_params,
    build_insert_statement,
    build_update_assignments,
    build_update_statement,
    field_set,
    model_field_set,
    normalize_tls_policy,
)
from .ports import AsyncpgPool, ConnectionHandle, ConnectionState, connect, parse_row_count


async def open_service(config: DatabaseConfig) -> DatabaseService:
    """Connect a pool for `config` and wrap it in a `DatabaseService`."""

    handle = await ConnectionHandle.open(config)
    return DatabaseService(handle)


__all__ = [
    "AsyncpgPool",
    "CardinalityError",
    "ConfigurationError",
    "ConnectionHandle",
    "ConnectionState",
    "DatabaseConfig",
    "DatabaseConnectionError",
    "DatabaseService",
    "FieldSet",
    "HandleClosedError",
    "NoOpUpdateError",
    "NotFoundError",
    "NotReadyError",
    "ParameterizedStatement",
    "PgShapeError",
    "QueryExecutionError",
    "QueryResult",
    "ReturningColumnError",
    "RowsAffected",
    "Table",
    "TlsPolicy",
    "build_insert_params",
    "build_insert_statement",
    "build_update_assignments",
    "build_update_statement",
    "connect",
    "field_set",
    "model_field_set",
    "normalize_tls_policy",
    "open_service",
    "parse_row_count",
]
