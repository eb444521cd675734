from __future__ import annotations

import asyncio
from typing import Any

from pgshape.core.types import QueryResult


class FakePool:
    """Pool double that returns queued results and records statements."""

    def __init__(self, results: list[Any] | None = None):
        self.results: list[Any] = list(results or [])
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.end_calls = 0
        self.gate: asyncio.Event | None = None

    async def query(self, sql: str, params: Any = ()) -> QueryResult:
        self.calls.append((sql, tuple(params)))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.results.pop(0) if self.results else QueryResult()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def end(self) -> None:
        self.end_calls += 1


class FakeConnector:
    """Connector double whose completion is controlled by the test."""

    def __init__(self, pool: FakePool | None = None, error: Exception | None = None):
        self.pool = pool if pool is not None else FakePool()
        self.error = error
        self.calls: list[tuple[str, Any, dict[str, Any]]] = []
        self.release = asyncio.Event()
        self.release.set()

    async def __call__(self, dsn: str, tls: Any, **options: Any) -> FakePool:
        self.calls.append((dsn, tls, options))
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.pool


class FakeEngineError(Exception):
    """Mimics a driver error carrying a SQLSTATE code."""

    def __init__(self, message: str, sqlstate: str):
        super().__init__(message)
        self.sqlstate = sqlstate


class RecordingExecutor:
    """Executor double for `DatabaseService` tests."""

    def __init__(self, results: list[QueryResult] | None = None):
        self.results = list(results or [])
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.end_calls = 0

    async def execute(self, sql: str, params: Any = ()) -> QueryResult:
        self.calls.append((sql, tuple(params)))
        return self.results.pop(0) if self.results else QueryResult()

    async def end(self) -> None:
        self.end_calls += 1


def rows_result(*rows: dict[str, Any]) -> QueryResult:
    return QueryResult(rows=list(rows), row_count=len(rows))


def count_result(count: int) -> QueryResult:
    return QueryResult(rows=[], row_count=count)
