"""Public core API for statement building and result mapping."""

from .config import DatabaseConfig, TlsPolicy, TlsPolicyInput, normalize_tls_policy
from .errors import (
    CardinalityError,
    ConfigurationError,
    DatabaseConnectionError,
    HandleClosedError,
    NoOpUpdateError,
    NotFoundError,
    NotReadyError,
    PgShapeError,
    QueryExecutionError,
    ReturningColumnError,
)
from .fields import FieldSet, Table, field_set, model_field_set
from .results import (
    RowsAffected,
    map_delete_many,
    map_delete_one,
    map_find_many,
    map_find_one,
    map_insert,
    map_insert_one,
    map_update,
)
from .service import DatabaseService
from .statements import (
    build_insert_params,
    build_insert_statement,
    build_update_assignments,
    build_update_statement,
    placeholder,
)
from .types import ParameterizedStatement, QueryResult

__all__ = [
    "CardinalityError",
    "ConfigurationError",
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
    "TlsPolicyInput",
    "build_insert_params",
    "build_insert_statement",
    "build_update_assignments",
    "build_update_statement",
    "field_set",
    "map_delete_many",
    "map_delete_one",
    "map_find_many",
    "map_find_one",
    "map_insert",
    "map_insert_one",
    "map_update",
    "model_field_set",
    "normalize_tls_policy",
    "placeholder",
]
