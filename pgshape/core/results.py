"""Cardinality contracts applied on top of raw rowsets.

Every mapper reads `QueryResult.row_count` first and only looks at `rows` when
the count allows it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

from .errors import CardinalityError, NotFoundError, ReturningColumnError
from .types import MaybeRow, QueryResult, Rows


@dataclass(frozen=True)
class RowsAffected:
    """Tagged affected-row count.

    Zero affected rows is a successful outcome: the value is falsy but it is
    not an error. Compares equal to plain integers.
    """

    count: int

    def __bool__(self) -> bool:
        return self.count > 0

    def __int__(self) -> int:
        return self.count

    def __index__(self) -> int:
        return self.count

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RowsAffected):
            return self.count == other.count
        if isinstance(other, int) and not isinstance(other, bool):
            return self.count == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.count)


def map_find_one(result: QueryResult) -> MaybeRow:
    """Return `None`, the single row, or fail on an ambiguous result."""

    if result.row_count == 0:
        return None
    if result.row_count > 1:
        raise CardinalityError(
            f"Expected at most one row, got {result.row_count}; "
            "possible cartesian product.",
            expected="at most one",
            actual=result.row_count,
        )
    return result.rows[0] if result.rows else None


def map_find_many(result: QueryResult) -> Rows:
    """Return every row; zero rows give an empty list."""

    if result.row_count == 0:
        return []
    return list(result.rows)


def map_delete_one(result: QueryResult) -> Literal[True]:
    """Require exactly one affected row."""

    if result.row_count == 0:
        raise NotFoundError("Expected exactly one row to delete, found none.")
    if result.row_count > 1:
        raise CardinalityError(
            f"Expected exactly one row to delete, {result.row_count} were affected.",
            expected="exactly one",
            actual=result.row_count,
        )
    return True


def map_delete_many(result: QueryResult) -> RowsAffected:
    """Return the affected-row count; zero is a falsy success, not an error."""

    return RowsAffected(result.row_count)


def map_insert(result: QueryResult) -> Union[Literal[False], Rows]:
    """Return inserted rows, or `False` when nothing was inserted.

    Zero rows typically means an `ON CONFLICT DO NOTHING` was satisfied.
    """

    if result.row_count == 0:
        return False
    return list(result.rows)


def map_insert_one(result: QueryResult, id_column: str = "id") -> Optional[Any]:
    """Return the id column of the first inserted row.

    Returns `None` when nothing was inserted. The statement must carry a
    `RETURNING` clause that includes `id_column`.

    Raises:
        ReturningColumnError: If the first returned row lacks `id_column`.
    """

    if result.row_count == 0:
        return None
    if not result.rows or id_column not in result.rows[0]:
        raise ReturningColumnError(
            f"Inserted row has no {id_column!r} column; "
            f"add it to the RETURNING clause."
        )
    return result.rows[0][id_column]


def map_update(result: QueryResult) -> int:
    """Return the affected-row count without any cardinality check."""

    return result.row_count
