"""Loan-level facade over a row store."""

from __future__ import annotations

import logging
from datetime import date

from loanbot.db.rowstore import RowStore
from loanbot.loans.errors import ErrorCode, StoreError
from loanbot.loans.records import LOAN_COLUMNS, RETURNED_AT_COLUMN, LoanRecord, record_from_row

logger = logging.getLogger(__name__)


class LoanRecordStore:
    """Reads and writes loan records in the configured table."""

    def __init__(self, rows: RowStore) -> None:
        self._rows = rows

    @property
    def name(self) -> str:
        return self._rows.name

    async def exists(self) -> bool:
        return await self._rows.exists()

    async def require(self) -> None:
        """Raise `StoreError(store_missing)` if the loans table does not exist."""

        if not await self._rows.exists():
            raise StoreError(ErrorCode.store_missing, table=self._rows.name)

    async def ensure_schema(self) -> None:
        """Create or repair the loans table.

        A header that differs from `LOAN_COLUMNS` in names or order resets the table, which destroys
        existing rows. When the header already matches, nothing is written.
        """

        if await self._rows.ensure_header(LOAN_COLUMNS):
            logger.warning("loans table %s was created or reset", self._rows.name)

    async def list_all(self) -> list[LoanRecord]:
        header = await self._rows.header()
        rows = await self._rows.list_rows()
        return [record_from_row(header, row) for row in rows]

    async def append(self, record: LoanRecord) -> None:
        await self._rows.append_row(record.to_row())

    async def update_returned_at(self, position: int, value: date) -> None:
        """Overwrite the `returnedAt` cell of the row at `position`.

        Raises:
            StoreError: `field_not_found` if the header has no `returnedAt` column.
        """

        header = await self._rows.header()
        if RETURNED_AT_COLUMN not in header:
            raise StoreError(ErrorCode.field_not_found, field=RETURNED_AT_COLUMN)
        await self._rows.set_cell(position, RETURNED_AT_COLUMN, value)

    async def delete_row(self, position: int) -> None:
        await self._rows.delete_row(position)
