"""Cancel or early-return a loan by its per-request record index.

The index a user types is the 1-based rank of the loan in `actionable_records`, rebuilt from the
store on every call. A loan that has not started yet is removed (cancellation). A loan already in
progress represents equipment in use, so it is kept and its end date is truncated to today
(early return).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from loanbot.db.rowstore import RowStoreError
from loanbot.loans import messages
from loanbot.loans.dates import coerce_to_date, start_of_day
from loanbot.loans.errors import DeletionError, ErrorCode
from loanbot.loans.records import LoanRecord, actionable_records
from loanbot.loans.store import LoanRecordStore

logger = logging.getLogger(__name__)


class DeletionKind(StrEnum):
    cancelled = "cancelled"
    returned_early = "returned_early"


class OperationDenial(StrEnum):
    """Why `can_operate` refused a record."""

    not_owner = "not_owner"
    bad_date = "bad_date"
    expired = "expired"


@dataclass(frozen=True)
class DeletionOutcome:
    """What happened to the selected loan, with the dates to echo back."""

    kind: DeletionKind
    borrowed_at: datetime
    returned_at: datetime
    items: str

    def message(self) -> str:
        if self.kind == DeletionKind.cancelled:
            return messages.cancellation_confirmation(self.borrowed_at, self.returned_at, self.items)
        return messages.early_return_confirmation(self.borrowed_at, self.returned_at, self.items)


@dataclass(frozen=True)
class OperationCheck:
    allowed: bool
    reason: OperationDenial | None = None


def can_operate(record: LoanRecord, user_id: str, today: date) -> OperationCheck:
    """Whether `user_id` may still cancel or return `record`.

    Advisory only: `delete_loan` relies on `actionable_records`, which also admits loans ending
    today.
    """

    if record.user_id != user_id:
        return OperationCheck(allowed=False, reason=OperationDenial.not_owner)

    returned_at = coerce_to_date(record.returned_at)
    if returned_at is None:
        return OperationCheck(allowed=False, reason=OperationDenial.bad_date)

    if start_of_day(returned_at) < start_of_day(today):
        return OperationCheck(allowed=False, reason=OperationDenial.expired)

    return OperationCheck(allowed=True)


def parse_record_index(value: Any) -> int:
    """Validate a user-supplied record index (positive integer)."""

    if isinstance(value, bool):
        raise DeletionError(ErrorCode.invalid_index, value=value)
    try:
        index = int(str(value).strip())
    except ValueError as exc:
        raise DeletionError(ErrorCode.invalid_index, value=value) from exc
    if index < 1:
        raise DeletionError(ErrorCode.invalid_index, value=value)
    return index


async def delete_loan(
        store: LoanRecordStore,
        user_id: str,
        index: Any,
        *,
        today: date,
) -> DeletionOutcome:
    """Cancel (future loan) or truncate to today (loan in progress) the user's `index`-th loan.

    Raises:
        StoreError: `store_missing`, or `field_not_found` when truncating without a `returnedAt`
            column.
        DeletionError: `invalid_index`, `index_out_of_range`, or `processing_error` when the row
            store fails during the write.
    """

    await store.require()
    rank = parse_record_index(index)

    today_start = start_of_day(today)
    candidates = actionable_records(await store.list_all(), user_id, today_start)
    if rank > len(candidates):
        raise DeletionError(ErrorCode.index_out_of_range, index=rank, available=len(candidates))

    selected = candidates[rank - 1]
    record = selected.record

    borrowed_at = coerce_to_date(record.borrowed_at)
    returned_at = coerce_to_date(record.returned_at)
    if borrowed_at is None or returned_at is None:
        logger.error("loan at position=%d has an unreadable borrowedAt", selected.position)
        raise DeletionError(ErrorCode.processing_error, position=selected.position)

    try:
        if start_of_day(borrowed_at) > today_start:
            await store.delete_row(selected.position)
            outcome = DeletionOutcome(
                kind=DeletionKind.cancelled,
                borrowed_at=start_of_day(borrowed_at),
                returned_at=start_of_day(returned_at),
                items=record.items,
            )
        else:
            await store.update_returned_at(selected.position, today_start.date())
            outcome = DeletionOutcome(
                kind=DeletionKind.returned_early,
                borrowed_at=start_of_day(borrowed_at),
                returned_at=today_start,
                items=record.items,
            )
    except RowStoreError as exc:
        logger.exception("row store failed while processing position=%d", selected.position)
        raise DeletionError(ErrorCode.processing_error, position=selected.position) from exc

    logger.info(
        "loan %s position=%d user=%s",
        outcome.kind.value,
        selected.position,
        user_id,
    )
    return outcome
