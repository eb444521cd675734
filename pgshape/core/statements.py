"""INSERT/UPDATE statement builders for allow-listed records.

This module turns an input record plus an allow-list of column names into
ordered columns, `$n` placeholders, and parameter values. Record keys missing
from the allow-list are dropped silently; that is the mass-assignment guard.
Column names that take part in a statement must be plain identifiers
(`check_identifier`); anything else raises `ValueError` before SQL is built.

Table names, `RETURNING` and `ON CONFLICT` clauses are interpolated as raw
text. They must be schema-controlled strings owned by application code.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .errors import NoOpUpdateError
from .fields import FieldSet, check_identifier, field_set
from .types import ParameterizedStatement, Record

FieldsInput = Optional[Iterable[str]]


def placeholder(index: int) -> str:
    """Return the 1-based positional placeholder for `index`."""

    if index < 1:
        raise ValueError("Placeholder index must be >= 1.")
    return f"${index}"


def _resolve_fields(fields: FieldsInput, record: Record) -> FieldSet:
    if fields is None:
        return field_set(record.keys())
    return field_set(fields)


def build_insert_params(
    fields: FieldsInput, record: Record
) -> Tuple[List[str], List[str], List[Any]]:
    """Filter `record` through `fields` and number its placeholders.

    Args:
        fields: Ordered allow-list. Its order decides column order. `None`
            allows every key of `record`, in record order.
        record: Input values keyed by column name. `None` values are kept.

    Returns:
        `(columns, placeholders, params)` with equal lengths.
    """

    columns: List[str] = []
    placeholders: List[str] = []
    params: List[Any] = []
    for name in _resolve_fields(fields, record):
        if name not in record:
            continue
        columns.append(name)
        placeholders.append(placeholder(len(params) + 1))
        params.append(record[name])
    return columns, placeholders, params


def build_update_assignments(
    fields: FieldsInput,
    record: Record,
    seed_params: Sequence[Any] = (),
) -> Tuple[List[str], List[Any]]:
    """Build `name = $k` fragments continuing after `seed_params`.

    Args:
        fields: Ordered allow-list, or `None` for every record key.
        record: Input values keyed by column name.
        seed_params: Values bound before the assignments, e.g. a primary key.

    Returns:
        `(assignments, params)` where `params` starts with `seed_params`.

    Raises:
        NoOpUpdateError: If no record key survives the allow-list.
    """

    allowed = _resolve_fields(fields, record)
    assignments: List[str] = []
    params: List[Any] = list(seed_params)
    for name in allowed:
        if name not in record:
            continue
        params.append(record[name])
        assignments.append(f"{name} = {placeholder(len(params))}")

    if not assignments:
        ignored = [key for key in record if key not in allowed]
        raise NoOpUpdateError(
            "No updatable columns in record after allow-list filtering.",
            ignored=ignored,
        )
    return assignments, params


def build_insert_statement(
    table: str,
    record: Record,
    returning: Optional[str] = None,
    on_conflict: Optional[str] = None,
    fields: FieldsInput = None,
) -> ParameterizedStatement:
    """Assemble `INSERT INTO ... VALUES ... [ON CONFLICT ...] [RETURNING ...]`.

    `on_conflict` is the text after `ON CONFLICT` (e.g. `"DO NOTHING"` or
    `"(email) DO UPDATE SET name = EXCLUDED.name"`); `returning` is the text
    after `RETURNING`. A record with no allowed column inserts `DEFAULT VALUES`.
    """

    columns, placeholders, params = build_insert_params(fields, record)
    if columns:
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)})"
        )
    else:
        sql = f"INSERT INTO {table} DEFAULT VALUES"
    if on_conflict:
        sql += f" ON CONFLICT {on_conflict}"
    if returning:
        sql += f" RETURNING {returning}"
    return ParameterizedStatement(sql, tuple(params))


def build_update_statement(
    table: str,
    record: Record,
    id: Any,
    allowed_fields: FieldsInput = None,
    pkey_column: str = "id",
    touch_column: Optional[str] = None,
) -> ParameterizedStatement:
    """Assemble `UPDATE table SET ... WHERE pkey_column = $1`.

    The primary key value is always `$1`; assignments are numbered from `$2`.
    `touch_column` is set to the engine's `CURRENT_TIMESTAMP`, unparameterized.

    Raises:
        NoOpUpdateError: If the record contributes no allowed column. The touch
            column alone does not count as a change.
        ValueError: If a column name is not a plain identifier.
    """

    check_identifier(pkey_column)
    if touch_column:
        check_identifier(touch_column)
    if touch_column and touch_column in record:
        record = {key: value for key, value in record.items() if key != touch_column}
    assignments, params = build_update_assignments(allowed_fields, record, [id])
    if touch_column:
        assignments.append(f"{touch_column} = CURRENT_TIMESTAMP")
    sql = (
        f"UPDATE {table} SET {', '.join(assignments)} "
        f"WHERE {pkey_column} = {placeholder(1)}"
    )
    return ParameterizedStatement(sql, tuple(params))
