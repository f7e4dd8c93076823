"""
Async database access helpers using asyncpg.

This module owns the connection pool. FastAPI creates it on startup and
closes it on shutdown (see `api/main.py`); the pool is then handed to the
document store explicitly instead of being looked up globally.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

`json`/`jsonb` columns are encoded/decoded as Python dicts on every
pooled connection (see `_init_connection`).
"""

from __future__ import annotations

import json
import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings

logger = logging.getLogger(__name__)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = settings.env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def _init_connection(conn: asyncpg.Connection) -> None:
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


async def create_pool(dsn: str | None = None) -> asyncpg.Pool:
    pool = await asyncpg.create_pool(
        dsn=dsn or database_url(),
        min_size=settings.db_pool_min_size(),
        max_size=settings.db_pool_max_size(),
        command_timeout=30,
        init=_init_connection,
    )
    logger.info(
        "db_pool_created min_size=%s max_size=%s",
        settings.db_pool_min_size(),
        settings.db_pool_max_size(),
    )
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return None
    await pool.close()
    logger.info("db_pool_closed")
