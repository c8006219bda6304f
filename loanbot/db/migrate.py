"""Create or repair the loans table.

The bot checks the table header on every update anyway; this command lets an operator prepare the
database before the first deployment (or wipe it with `--recreate`).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os

from dotenv import load_dotenv

from loanbot.config.logging import configure_logging
from loanbot.db.pool import create_pool, require_database_url
from loanbot.db.postgres import LOAN_COLUMN_TYPES, PostgresRowStore
from loanbot.loans.store import LoanRecordStore

logger = logging.getLogger(__name__)


async def migrate(*, table: str, timezone: str, recreate: bool) -> None:
    """Ensure the loans table exists with the expected header."""

    load_dotenv(".env")
    pool = create_pool(require_database_url(), timezone=timezone, max_size=1)
    await pool.open(wait=True)
    try:
        rows = PostgresRowStore(pool, table, column_types=LOAN_COLUMN_TYPES)
        if recreate:
            logger.warning("dropping table %s", table)
            await rows.drop()
        await LoanRecordStore(rows).ensure_schema()
        logger.info("table %s is ready", table)
    finally:
        await pool.close()


def main() -> None:
    """CLI entry point for preparing the loans table."""

    load_dotenv(".env")
    parser = argparse.ArgumentParser(description="Create or repair the loans table in Postgres.")
    parser.add_argument(
        "--table",
        default=os.getenv("LOANS_TABLE") or "loans",
        help="Table name (defaults to LOANS_TABLE or 'loans').",
    )
    parser.add_argument(
        "--timezone",
        default=os.getenv("BOT_TIMEZONE") or "Asia/Taipei",
        help="Session timezone (defaults to BOT_TIMEZONE or 'Asia/Taipei').",
    )
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop the table before recreating it (destructive).",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(migrate(table=args.table, timezone=args.timezone, recreate=args.recreate))


if __name__ == "__main__":
    main()
