"""
Document persistence for GitHub records (raw SQL, jsonb documents).

Each collection is one table keyed by the record's natural identifier:
- users -> github_users (login)
- repos -> github_repos (full_name)

All write primitives are single statements, so concurrent requests
writing the same key rely on `ON CONFLICT` rather than app-level locks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import asyncpg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collection:
    table: str
    key_field: str


COLLECTIONS: dict[str, Collection] = {
    "users": Collection(table="github_users", key_field="login"),
    "repos": Collection(table="github_repos", key_field="full_name"),
}

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    key text PRIMARY KEY,
    data jsonb NOT NULL,
    created_at timestamptz NOT NULL DEFAULT now(),
    updated_at timestamptz NOT NULL DEFAULT now()
)
"""


class UnknownCollectionError(KeyError):
    pass


@dataclass
class BulkInsertResult:
    inserted: int = 0
    # (key or None, error message) per rejected payload.
    failures: list[tuple[str | None, str]] = field(default_factory=list)


class BulkInsertError(RuntimeError):
    def __init__(self, result: BulkInsertResult) -> None:
        super().__init__(
            f"{len(result.failures)} of {result.inserted + len(result.failures)} records failed to insert"
        )
        self.result = result


def collection(name: str) -> Collection:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise UnknownCollectionError(name) from None


class PostgresDocumentStore:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def ensure_schema(self) -> None:
        for coll in COLLECTIONS.values():
            await self._pool.execute(SCHEMA_SQL.format(table=coll.table))
        logger.info("schema_ready tables=%s", ",".join(c.table for c in COLLECTIONS.values()))

    async def get(self, collection_name: str, key: str) -> dict[str, Any] | None:
        coll = collection(collection_name)
        row = await self._pool.fetchrow(
            f"SELECT data FROM {coll.table} WHERE key = $1",
            key,
        )
        return row["data"] if row is not None else None

    async def upsert_full_replace(
        self,
        collection_name: str,
        key: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Insert or overwrite the whole stored document for `key`.

        Returns the document as stored after the upsert.
        """
        coll = collection(collection_name)
        row = await self._pool.fetchrow(
            f"""
            INSERT INTO {coll.table} (key, data)
            VALUES ($1, $2)
            ON CONFLICT (key) DO UPDATE
            SET data = EXCLUDED.data,
                updated_at = now()
            RETURNING data
            """,
            key,
            payload,
        )
        if row is None:
            raise RuntimeError(f"Failed to upsert {collection_name} record {key}.")
        return row["data"]

    async def bulk_insert_unordered(
        self,
        collection_name: str,
        payloads: list[dict[str, Any]],
    ) -> BulkInsertResult:
        """
        Insert each payload as a new document.

        Existing keys are not overwritten; a duplicate is a failure for that
        payload only. Every payload is attempted, then `BulkInsertError` is
        raised if any of them failed.
        """
        coll = collection(collection_name)
        result = BulkInsertResult()
        for payload in payloads:
            key = payload.get(coll.key_field)
            if not isinstance(key, str) or not key:
                result.failures.append((None, f"missing {coll.key_field}"))
                continue
            try:
                await self._pool.execute(
                    f"INSERT INTO {coll.table} (key, data) VALUES ($1, $2)",
                    key,
                    payload,
                )
            except Exception as exc:
                result.failures.append((key, str(exc)))
                continue
            result.inserted += 1

        if result.failures:
            raise BulkInsertError(result)
        return result

    async def upsert_merge(
        self,
        collection_name: str,
        key: str,
        fields: dict[str, Any],
    ) -> None:
        """
        Set `fields` on the stored document for `key`, creating it if needed.

        Stored fields not named in `fields` are left untouched.
        """
        coll = collection(collection_name)
        await self._pool.execute(
            f"""
            INSERT INTO {coll.table} (key, data)
            VALUES ($1, $2)
            ON CONFLICT (key) DO UPDATE
            SET data = {coll.table}.data || EXCLUDED.data,
                updated_at = now()
            """,
            key,
            fields,
        )
