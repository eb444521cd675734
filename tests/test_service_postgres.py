from __future__ import annotations

import importlib
import os
import unittest
from typing import Any

from pgshape import (
    CardinalityError,
    ConnectionHandle,
    DatabaseConfig,
    DatabaseService,
    NoOpUpdateError,
    NotFoundError,
    QueryExecutionError,
    Table,
)


def _has_asyncpg() -> bool:
    try:
        importlib.import_module("asyncpg")
    except ImportError:
        return False
    return True


def _dsn() -> str:
    explicit = os.getenv("PGSHAPE_PG_DSN")
    if explicit:
        return explicit
    password = os.getenv("PGSHAPE_PG_PASSWORD", os.getenv("PGPASSWORD", "password"))
    user = os.getenv("PGSHAPE_PG_USER", os.getenv("PGUSER", "postgres"))
    host = os.getenv("PGSHAPE_PG_HOST", os.getenv("PGHOST", "localhost"))
    port = os.getenv("PGSHAPE_PG_PORT", os.getenv("PGPORT", "5432"))
    database = os.getenv("PGSHAPE_PG_DATABASE", os.getenv("PGDATABASE", "postgres"))
    return f"postgres://{user}:{password}@{host}:{port}/{database}"


MEMBERS = Table("pgshape_member", fields=("email", "name", "age"), touch_column="updated_at")


@unittest.skipUnless(_has_asyncpg(), "asyncpg is not installed")
class ServicePostgresTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        config = DatabaseConfig(
            dsn=_dsn(),
            tls=os.getenv("PGSHAPE_PG_TLS", "disable"),
            max_size=2,
        )
        try:
            self.handle = await ConnectionHandle.open(config)
        except Exception as exc:
            raise unittest.SkipTest(
                f"PostgreSQL is not reachable at {config.redacted_dsn()}: {exc}"
            ) from exc
        self.db = DatabaseService(self.handle)
        await self.db.query("DROP TABLE IF EXISTS pgshape_member")
        await self.db.query(
            """CREATE TABLE pgshape_member (
                id SERIAL PRIMARY KEY,
                email TEXT UNIQUE NOT NULL,
                name TEXT,
                age INTEGER,
                updated_at TIMESTAMPTZ
            )"""
        )

    async def asyncTearDown(self) -> None:
        await self.db.query("DROP TABLE IF EXISTS pgshape_member")
        await self.db.end()

    async def _add(self, email: str, **extra: Any) -> int:
        return await self.db.insert_one(MEMBERS, {"email": email, **extra})

    async def test_insert_find_update_delete_roundtrip(self) -> None:
        member_id = await self._add("ann@example.com", name="Ann", role="admin")
        self.assertIsInstance(member_id, int)

        row = await self.db.find_one("SELECT * FROM pgshape_member WHERE id = $1", [member_id])
        self.assertEqual(row["name"], "Ann")
        self.assertIsNone(row["updated_at"])

        updated = await self.db.update_table(MEMBERS, {"age": 40}, member_id)
        self.assertEqual(updated, 1)
        row = await self.db.find_one("SELECT * FROM pgshape_member WHERE id = $1", [member_id])
        self.assertEqual(row["age"], 40)
        self.assertIsNotNone(row["updated_at"])

        self.assertIs(
            await self.db.delete_one("DELETE FROM pgshape_member WHERE id = $1", [member_id]),
            True,
        )
        with self.assertRaises(NotFoundError):
            await self.db.delete_one("DELETE FROM pgshape_member WHERE id = $1", [member_id])

    async def test_conflict_do_nothing_returns_false(self) -> None:
        await self._add("bo@example.com")

        result = await self.db.insert_table(
            MEMBERS, {"email": "bo@example.com"}, "id", "(email) DO NOTHING"
        )

        self.assertIs(result, False)

    async def test_duplicate_key_raises_query_execution_error(self) -> None:
        await self._add("cy@example.com")

        with self.assertRaises(QueryExecutionError) as ctx:
            await self._add("cy@example.com")

        self.assertEqual(ctx.exception.sqlstate, "23505")

    async def test_cardinality_and_delete_many(self) -> None:
        await self._add("a@example.com", age=1)
        await self._add("b@example.com", age=1)

        with self.assertRaises(CardinalityError):
            await self.db.find_one("SELECT * FROM pgshape_member WHERE age = $1", [1])
        self.assertEqual(
            len(await self.db.find_many("SELECT * FROM pgshape_member ORDER BY id")), 2
        )

        none_deleted = await self.db.delete_many("DELETE FROM pgshape_member WHERE age = $1", [9])
        self.assertFalse(none_deleted)
        deleted = await self.db.delete_many("DELETE FROM pgshape_member WHERE age = $1", [1])
        self.assertEqual(deleted, 2)

    async def test_noop_update_is_not_sent(self) -> None:
        member_id = await self._add("d@example.com")

        with self.assertRaises(NoOpUpdateError):
            await self.db.update_table(MEMBERS, {"id": 1000}, member_id)


if __name__ == "__main__":
    unittest.main()
