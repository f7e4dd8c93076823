"""
Postgres document store tests against a recording fake pool.

These check which statement is issued for each write primitive and that
bulk inserts isolate per-record failures; the SQL itself runs only
against a real database.
"""
from __future__ import annotations

from typing import Any

import pytest

from explorer.repository import (
    BulkInsertError,
    PostgresDocumentStore,
    UnknownCollectionError,
)


class FakePool:
    def __init__(self, *, failing_keys: set[str] | None = None) -> None:
        self.failing_keys = failing_keys or set()
        self.executed: list[tuple[str, tuple]] = []
        self.rows: dict[str, dict[str, Any]] = {}

    async def execute(self, sql: str, *args: Any) -> str:
        self.executed.append((sql, args))
        if args and args[0] in self.failing_keys:
            raise RuntimeError(f'duplicate key value violates unique constraint "{args[0]}"')
        if args:
            self.rows[args[0]] = args[1]
        return "INSERT 0 1"

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        self.executed.append((sql, args))
        if sql.lstrip().startswith("INSERT"):
            self.rows[args[0]] = args[1]
        data = self.rows.get(args[0])
        return {"data": data} if data is not None else None


@pytest.mark.asyncio
async def test_ensure_schema_creates_both_tables() -> None:
    pool = FakePool()
    await PostgresDocumentStore(pool).ensure_schema()

    statements = " ".join(sql for sql, _ in pool.executed)
    assert "CREATE TABLE IF NOT EXISTS github_users" in statements
    assert "CREATE TABLE IF NOT EXISTS github_repos" in statements


@pytest.mark.asyncio
async def test_upsert_full_replace_overwrites_whole_document() -> None:
    pool = FakePool()
    store = PostgresDocumentStore(pool)

    stored = await store.upsert_full_replace("users", "octocat", {"login": "octocat", "id": 1})

    sql, args = pool.executed[-1]
    assert "INSERT INTO github_users" in sql
    assert "ON CONFLICT (key) DO UPDATE" in sql
    assert "SET data = EXCLUDED.data" in sql
    assert "RETURNING data" in sql
    assert args == ("octocat", {"login": "octocat", "id": 1})
    assert stored == {"login": "octocat", "id": 1}


@pytest.mark.asyncio
async def test_upsert_merge_concatenates_jsonb() -> None:
    pool = FakePool()
    store = PostgresDocumentStore(pool)

    await store.upsert_merge("repos", "octocat/hello", {"stargazers_count": 3})

    sql, args = pool.executed[-1]
    assert "INSERT INTO github_repos" in sql
    assert "SET data = github_repos.data || EXCLUDED.data" in sql
    assert args == ("octocat/hello", {"stargazers_count": 3})


@pytest.mark.asyncio
async def test_bulk_insert_attempts_every_record_despite_failures() -> None:
    pool = FakePool(failing_keys={"octocat/b"})
    store = PostgresDocumentStore(pool)
    payloads = [{"full_name": f"octocat/{name}"} for name in ("a", "b", "c", "d")]

    with pytest.raises(BulkInsertError) as exc_info:
        await store.bulk_insert_unordered("repos", payloads)

    result = exc_info.value.result
    assert result.inserted == 3
    assert [key for key, _ in result.failures] == ["octocat/b"]
    assert set(pool.rows) == {"octocat/a", "octocat/c", "octocat/d"}
    assert all("ON CONFLICT" not in sql for sql, _ in pool.executed)


@pytest.mark.asyncio
async def test_bulk_insert_counts_records_without_key_as_failures() -> None:
    pool = FakePool()
    store = PostgresDocumentStore(pool)

    with pytest.raises(BulkInsertError) as exc_info:
        await store.bulk_insert_unordered("repos", [{"name": "orphan"}, {"full_name": "octocat/a"}])

    assert exc_info.value.result.inserted == 1
    assert exc_info.value.result.failures[0][0] is None


@pytest.mark.asyncio
async def test_bulk_insert_returns_result_when_all_succeed() -> None:
    pool = FakePool()
    result = await PostgresDocumentStore(pool).bulk_insert_unordered(
        "repos", [{"full_name": "octocat/a"}, {"full_name": "octocat/b"}]
    )

    assert result.inserted == 2
    assert result.failures == []


@pytest.mark.asyncio
async def test_get_returns_none_for_missing_key() -> None:
    store = PostgresDocumentStore(FakePool())

    assert await store.get("users", "nobody") is None


@pytest.mark.asyncio
async def test_unknown_collection_is_rejected() -> None:
    store = PostgresDocumentStore(FakePool())

    with pytest.raises(UnknownCollectionError):
        await store.upsert_merge("gists", "abc", {})
