"""Pool adapter and connection handle exports."""

from .asyncpg_pool import AsyncpgPool, connect, parse_row_count
from .connection import ConnectionHandle, ConnectionState

__all__ = [
    "AsyncpgPool",
    "ConnectionHandle",
    "ConnectionState",
    "connect",
    "parse_row_count",
]
