"""Application composition root.

This module wires together configuration, the DB pool, the loans table and the profile lookup for
the bot runtime.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from psycopg_pool import AsyncConnectionPool

from loanbot.bot.profiles import ProfileLookup
from loanbot.config.settings import Settings
from loanbot.db.pool import create_pool
from loanbot.db.postgres import LOAN_COLUMN_TYPES, PostgresRowStore
from loanbot.loans.store import LoanRecordStore


@dataclass(frozen=True)
class App:
    """Shared application dependencies for handlers.

    `write_lock` serialises the read-compute-write sequences (borrow, cancel/early return) inside
    this process. It does not protect against a second bot process sharing the same table.
    """

    settings: Settings
    pool: AsyncConnectionPool
    loans: LoanRecordStore
    profiles: ProfileLookup
    write_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def create_app(settings: Settings, *, profiles: ProfileLookup) -> App:
    """Create the application container.

    Note:
        The returned DB pool is not opened. Call `await app.pool.open()` at startup.
    """

    pool = create_pool(settings.database_url, timezone=settings.timezone, max_size=10)
    rows = PostgresRowStore(pool, settings.loans_table, column_types=LOAN_COLUMN_TYPES)
    return App(settings=settings, pool=pool, loans=LoanRecordStore(rows), profiles=profiles)
