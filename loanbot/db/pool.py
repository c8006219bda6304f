"""Async Postgres connection pool.

Every pooled session has its `TimeZone` set to the bot timezone so that `ts` values and the
calendar days users type are read in the same zone.
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import AsyncIterator

from dotenv import load_dotenv
from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool


def require_database_url() -> str:
    """Read `DATABASE_URL` from the environment or raise a clear error."""

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is required (set it in .env or environment)")
    return database_url


def session_timezone(timezone: str) -> Callable[[AsyncConnection], Awaitable[None]]:
    """Build a pool `configure` callback that sets the session timezone."""

    async def configure(conn: AsyncConnection) -> None:
        async with conn.cursor() as cur:
            await cur.execute("SELECT set_config('TimeZone', %s, false)", (timezone,))
        # Leave the connection idle, not INTRANS, when handing it to the pool.
        await conn.commit()

    return configure


def create_pool(
        database_url: str | None = None,
        *,
        timezone: str = "UTC",
        min_size: int = 1,
        max_size: int | None = None,
        timeout: float = 30.0,
) -> AsyncConnectionPool:
    """Create an async DB pool.

    Notes:
        - The returned pool is created with `open=False`. Call `await pool.open()` at startup.
        - If `database_url` is omitted, the function loads `.env` and reads `DATABASE_URL`.
    """

    if database_url is None:
        load_dotenv(".env")
        database_url = require_database_url()

    return AsyncConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        timeout=timeout,
        open=False,
        configure=session_timezone(timezone),
    )


@asynccontextmanager
async def get_conn(pool: AsyncConnectionPool) -> AsyncIterator[AsyncConnection]:
    """Acquire a pooled connection; the pool commits on clean exit and rolls back on error."""

    async with pool.connection() as conn:
        yield conn
