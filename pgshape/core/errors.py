"""Error taxonomy raised by pgshape."""

from __future__ import annotations

from typing import Any, Optional


class PgShapeError(Exception):
    """Base class for every error raised by pgshape."""


class ConfigurationError(PgShapeError, ValueError):
    """Raised when connection settings are missing or malformed."""


class DatabaseConnectionError(PgShapeError, ConnectionError):
    """Raised when connecting to, or tearing down, the pool fails."""


class NotReadyError(PgShapeError):
    """Raised when a query is issued on a handle that never started connecting."""


class HandleClosedError(NotReadyError):
    """Raised when a query is issued after `end()`."""


class QueryExecutionError(PgShapeError):
    """Raised when the engine rejects a statement.

    The engine error is kept as `__cause__`; its SQLSTATE code is copied to
    `sqlstate` so callers can branch without importing the driver.
    """

    def __init__(self, message: str, *, sql: str = "", sqlstate: Optional[str] = None):
        super().__init__(message)
        self.sql = sql
        self.sqlstate = sqlstate


class CardinalityError(PgShapeError):
    """Raised when an at-most-one or exactly-one operation sees several rows."""

    def __init__(self, message: str, *, expected: str, actual: int):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class NotFoundError(PgShapeError, LookupError):
    """Raised when an exactly-one operation sees zero rows."""


class NoOpUpdateError(PgShapeError):
    """Raised when an update has no column left after allow-list filtering.

    Callers may treat it as an idempotent success; `status` mirrors HTTP 304.
    """

    status = 304
    is_noop = True

    def __init__(self, message: str = "Nothing to update.", *, ignored: Any = ()):
        super().__init__(message)
        self.ignored = tuple(ignored)


class ReturningColumnError(PgShapeError, KeyError):
    """Raised when an inserted row does not carry the requested id column."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
