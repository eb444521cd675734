"""Core port contracts implemented by pool adapters."""

from __future__ import annotations

from typing import Any, Protocol

from .types import QueryParams, QueryResult


class PoolPort(Protocol):
    """Pooled database access required by `ConnectionHandle`."""

    async def query(self, sql: str, params: QueryParams = ()) -> QueryResult: ...

    async def end(self) -> None: ...


class ConnectorPort(Protocol):
    """Async factory that opens a `PoolPort` for a DSN and TLS policy."""

    async def __call__(self, dsn: str, tls: Any, **pool_options: Any) -> PoolPort: ...


class ExecutorPort(Protocol):
    """Single query primitive used by `DatabaseService`."""

    async def execute(self, sql: str, params: QueryParams = ()) -> QueryResult: ...

    async def end(self) -> None: ...
