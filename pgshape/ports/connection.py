"""Connection handle owning the pool and its readiness state machine."""

from __future__ import annotations

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Optional

from ..core.config import DatabaseConfig
from ..core.contracts import ConnectorPort, PoolPort
from ..core.errors import (
    DatabaseConnectionError,
    HandleClosedError,
    NotReadyError,
    PgShapeError,
    QueryExecutionError,
)
from ..core.types import QueryParams, QueryResult
from .asyncpg_pool import connect as asyncpg_connect

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ConnectionState(str, Enum):
    """Lifecycle states of a `ConnectionHandle`."""

    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class ConnectionHandle:
    """Own one pool and funnel every statement through `execute()`.

    The handle is not usable until its connect operation completes. Queries
    issued while connecting wait for readiness instead of racing it; queries
    issued before any connect was started fail with `NotReadyError`.

    `end()` is the only shutdown path. It rejects new queries at once, waits
    for in-flight queries to finish, then closes the pool.
    """

    def __init__(
        self,
        config: DatabaseConfig,
        *,
        connector: Optional[ConnectorPort] = None,
    ):
        self.config = config
        self._connector = connector if connector is not None else asyncpg_connect
        self._state = ConnectionState.UNINITIALIZED
        self._pool: PoolPort | None = None
        self._ready: asyncio.Future[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._connect_error: DatabaseConnectionError | None = None
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._end_lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        config: DatabaseConfig,
        *,
        connector: Optional[ConnectorPort] = None,
    ) -> ConnectionHandle:
        """Create a handle and wait until its pool is ready."""

        handle = cls(config, connector=connector)
        await handle.connect()
        return handle

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ConnectionState.READY

    @property
    def in_flight(self) -> int:
        """Number of statements currently awaiting the pool."""

        return self._in_flight

    def start(self) -> asyncio.Future[None]:
        """Schedule the connect operation and return the readiness future.

        Calling it again returns the same future. Must run inside an event loop.
        """

        if self._state is ConnectionState.CLOSED:
            raise HandleClosedError("Connection handle is closed.")
        if self._ready is not None:
            return self._ready

        loop = asyncio.get_running_loop()
        self._ready = loop.create_future()
        self._state = ConnectionState.CONNECTING
        self._connect_task = loop.create_task(self._run_connect(self._ready))
        return self._ready

    async def _run_connect(self, ready: asyncio.Future[None]) -> None:
        dsn = self.config.redacted_dsn()
        logger.info("Connecting pool to %s (tls=%s)", dsn, self.config.tls.value)
        try:
            pool = await _maybe_await(
                self._connector(
                    self.config.dsn,
                    self.config.tls,
                    **self.config.pool_options(),
                )
            )
        except asyncio.CancelledError:
            self._fail(ready, DatabaseConnectionError(f"Connect to {dsn} was cancelled."))
            raise
        except Exception as exc:
            error = DatabaseConnectionError(f"Could not connect to {dsn}: {exc}")
            error.__cause__ = exc
            logger.warning("Pool connect to %s failed: %s", dsn, exc)
            self._fail(ready, error)
            return

        self._pool = pool
        self._state = ConnectionState.READY
        logger.info("Pool ready for %s", dsn)
        if not ready.done():
            ready.set_result(None)

    def _fail(self, ready: asyncio.Future[None], error: DatabaseConnectionError) -> None:
        self._state = ConnectionState.FAILED
        self._connect_error = error
        if not ready.done():
            ready.set_exception(error)
        if not ready.cancelled():
            # Marks the error retrieved; later callers read `_connect_error`.
            ready.exception()

    async def wait_ready(self, timeout: Optional[float] = None) -> None:
        """Wait for the connect operation started by `start()`.

        Raises:
            NotReadyError: If no connect was started.
            DatabaseConnectionError: If the connect failed.
            asyncio.TimeoutError: If `timeout` elapses first. The connect itself
                keeps running.
        """

        if self._ready is None:
            raise NotReadyError("Connection handle was never started; call connect().")
        waiter = asyncio.shield(self._ready)
        if timeout is None:
            await waiter
        else:
            await asyncio.wait_for(waiter, timeout)

    async def connect(self) -> None:
        """Start connecting if needed and block until the pool is ready."""

        self.start()
        await self.wait_ready()

    async def _require_ready(self) -> PoolPort:
        state = self._state
        if state is ConnectionState.CONNECTING:
            await self.wait_ready()
            state = self._state

        if state is ConnectionState.READY and self._pool is not None:
            return self._pool
        if state is ConnectionState.CLOSED:
            raise HandleClosedError("Connection handle is closed.")
        if state is ConnectionState.FAILED and self._connect_error is not None:
            raise self._connect_error
        raise NotReadyError("Connection handle was never started; call connect().")

    async def execute(self, sql: str, params: QueryParams = ()) -> QueryResult:
        """Run one statement and return its raw rowset.

        Engine rejections are raised as `QueryExecutionError` with the driver
        exception as `__cause__`. Other driver failures propagate unchanged.
        """

        pool = await self._require_ready()
        self._in_flight += 1
        self._idle.clear()
        try:
            logger.debug("Executing statement: %s", sql)
            return await pool.query(sql, tuple(params))
        except PgShapeError:
            raise
        except Exception as exc:
            sqlstate = getattr(exc, "sqlstate", None)
            if sqlstate is None:
                raise
            logger.warning("Statement rejected (sqlstate=%s): %s", sqlstate, exc)
            raise QueryExecutionError(str(exc), sql=sql, sqlstate=sqlstate) from exc
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    async def end(self) -> None:
        """Drain in-flight queries and close the pool. Safe to call repeatedly.

        The pool reference is kept until it is closed, so an `end()` cancelled
        while draining leaves the next `end()` able to finish the close.
        """

        async with self._end_lock:
            if self._state is ConnectionState.CONNECTING and self._ready is not None:
                await asyncio.wait({self._ready})

            self._state = ConnectionState.CLOSED
            pool = self._pool
            if pool is None:
                return

            if self._in_flight:
                logger.info("Waiting for %d in-flight statement(s) before close", self._in_flight)
            await self._idle.wait()
            try:
                await _maybe_await(pool.end())
            except Exception as exc:
                self._pool = None
                raise DatabaseConnectionError(f"Failed to close pool: {exc}") from exc
            self._pool = None
            logger.info("Pool closed for %s", self.config.redacted_dsn())

    async def __aenter__(self) -> ConnectionHandle:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.end()
