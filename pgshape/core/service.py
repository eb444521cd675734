"""Table-level convenience facade over a connection handle."""

from __future__ import annotations

from typing import Any, Iterable, Literal, Optional, Union

from .contracts import ExecutorPort
from .fields import FieldSet, Table
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
from .statements import build_insert_statement, build_update_statement
from .types import MaybeRow, QueryParams, QueryResult, Record, Rows

TableInput = Union[str, Table]


def _table_defaults(table: TableInput) -> tuple[str, Optional[FieldSet], str, Optional[str]]:
    # An empty Table allow-list stays empty; only `fields=None` allows every key.
    if isinstance(table, Table):
        return table.name, table.fields, table.pkey, table.touch_column
    return table, None, "id", None


class DatabaseService:
    """Async access layer with cardinality-checked helpers.

    Raw-SQL helpers take `$n` placeholders; table helpers generate them from
    allow-listed records. Every statement goes through `executor.execute()`.
    """

    def __init__(self, executor: ExecutorPort):
        self.executor = executor

    async def query(self, sql: str, params: Optional[QueryParams] = None) -> QueryResult:
        """Run raw SQL and return the unmapped rowset."""

        return await self.executor.execute(sql, params or ())

    async def insert(self, sql: str, params: Optional[QueryParams] = None) -> QueryResult:
        return await self.query(sql, params)

    async def upsert(self, sql: str, params: Optional[QueryParams] = None) -> QueryResult:
        return await self.query(sql, params)

    async def delete(self, sql: str, params: Optional[QueryParams] = None) -> QueryResult:
        return await self.query(sql, params)

    async def find_one(self, sql: str, params: Optional[QueryParams] = None) -> MaybeRow:
        """Return one row or `None`; several rows raise `CardinalityError`."""

        return map_find_one(await self.query(sql, params))

    async def find_many(self, sql: str, params: Optional[QueryParams] = None) -> Rows:
        return map_find_many(await self.query(sql, params))

    async def update(self, sql: str, params: Optional[QueryParams] = None) -> int:
        """Run an UPDATE and return the affected-row count."""

        return map_update(await self.query(sql, params))

    async def delete_one(self, sql: str, params: Optional[QueryParams] = None) -> Literal[True]:
        """Run a DELETE that must affect exactly one row."""

        return map_delete_one(await self.query(sql, params))

    async def delete_many(self, sql: str, params: Optional[QueryParams] = None) -> RowsAffected:
        """Run a DELETE and return a falsy-when-zero `RowsAffected`."""

        return map_delete_many(await self.query(sql, params))

    async def insert_table(
        self,
        table: TableInput,
        record: Record,
        returning: Optional[str] = None,
        on_conflict: Optional[str] = None,
        fields: Optional[Iterable[str]] = None,
    ) -> Union[Literal[False], Rows]:
        """Insert an allow-listed record.

        Returns `False` when no row was inserted (a satisfied
        `ON CONFLICT DO NOTHING`), otherwise the rows from `RETURNING`.
        """

        name, table_fields, _, _ = _table_defaults(table)
        statement = build_insert_statement(
            name,
            record,
            returning=returning,
            on_conflict=on_conflict,
            fields=fields if fields is not None else table_fields,
        )
        return map_insert(await self.executor.execute(statement.sql, statement.params))

    async def insert_one(
        self,
        table: TableInput,
        record: Record,
        id_column: str = "id",
        on_conflict: Optional[str] = None,
        fields: Optional[Iterable[str]] = None,
        returning: Optional[str] = None,
    ) -> Optional[Any]:
        """Insert one record and return its id column.

        `returning` defaults to `id_column`. Returns `None` when nothing was
        inserted; raises `ReturningColumnError` when the returned row lacks
        `id_column`.
        """

        name, table_fields, _, _ = _table_defaults(table)
        statement = build_insert_statement(
            name,
            record,
            returning=returning or id_column,
            on_conflict=on_conflict,
            fields=fields if fields is not None else table_fields,
        )
        result = await self.executor.execute(statement.sql, statement.params)
        return map_insert_one(result, id_column)

    async def update_table(
        self,
        table: TableInput,
        record: Record,
        id: Any,
        allowed_fields: Optional[Iterable[str]] = None,
        pkey_column: Optional[str] = None,
        touch_column: Optional[str] = None,
    ) -> int:
        """Update one row by primary key and return the affected-row count.

        Raises `NoOpUpdateError` before anything is sent when the record has
        no allowed column.
        """

        name, table_fields, table_pkey, table_touch = _table_defaults(table)
        statement = build_update_statement(
            name,
            record,
            id,
            allowed_fields=allowed_fields if allowed_fields is not None else table_fields,
            pkey_column=pkey_column or table_pkey,
            touch_column=touch_column or table_touch,
        )
        return map_update(await self.executor.execute(statement.sql, statement.params))

    async def end(self) -> None:
        await self.executor.end()
