"""Shared core types used across contracts, statement building, and mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple

RowMapping = Mapping[str, Any]
Rows = List[RowMapping]
MaybeRow = Optional[RowMapping]
Record = Mapping[str, Any]
QueryParams = Sequence[Any]


@dataclass(frozen=True)
class ParameterizedStatement:
    """SQL text with `$n` placeholders and the values bound to them, in order."""

    sql: str
    params: Tuple[Any, ...] = ()

    def __iter__(self):
        # Allows `sql, params = statement`.
        yield self.sql
        yield self.params


@dataclass(frozen=True)
class QueryResult:
    """Raw rowset returned by the pool.

    `row_count` is authoritative for every cardinality decision; `rows` only
    holds the rows returned by the statement (empty without `RETURNING`).
    """

    rows: Rows = field(default_factory=list)
    row_count: int = 0

    def __post_init__(self) -> None:
        if self.row_count < 0:
            raise ValueError("row_count must be >= 0.")
