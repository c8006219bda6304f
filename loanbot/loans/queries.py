"""Read-only loan reports: bookings on a day, bookings in a month, and a requester's own loans."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from loanbot.loans import messages
from loanbot.loans.dates import MonthSpan, coerce_to_date, parse_day, parse_month, start_of_day
from loanbot.loans.errors import ErrorCode, QueryError
from loanbot.loans.records import LoanRecord, actionable_records
from loanbot.loans.store import LoanRecordStore


def _loan_bounds(record: LoanRecord) -> tuple[datetime, datetime] | None:
    borrowed_at = coerce_to_date(record.borrowed_at)
    returned_at = coerce_to_date(record.returned_at)
    if borrowed_at is None or returned_at is None:
        return None
    return start_of_day(borrowed_at), start_of_day(returned_at)


def loans_on_day(records: Sequence[LoanRecord], day: date) -> list[LoanRecord]:
    """Loans occupying `day` (`borrowedAt <= day <= returnedAt`), in storage order."""

    target = start_of_day(day)
    found: list[LoanRecord] = []
    for record in records:
        bounds = _loan_bounds(record)
        if bounds is not None and bounds[0] <= target <= bounds[1]:
            found.append(record)
    return found


def loans_in_month(records: Sequence[LoanRecord], month: MonthSpan) -> list[LoanRecord]:
    """Loans whose period overlaps the month, sorted by start date (stable)."""

    month_start = start_of_day(month.start)
    month_end = start_of_day(month.end)

    found: list[tuple[datetime, LoanRecord]] = []
    for record in records:
        bounds = _loan_bounds(record)
        if bounds is None:
            continue
        borrow_start, borrow_end = bounds
        if borrow_start <= month_end and borrow_end >= month_start:
            found.append((borrow_start, record))

    found.sort(key=lambda pair: pair[0])
    return [record for _, record in found]


async def query_day(store: LoanRecordStore, day_text: str) -> str:
    """Report every loan occupying the given `YYYY.MM.DD` day.

    Raises:
        StoreError: `store_missing` if the loans table does not exist.
        QueryError: `invalid_argument` if the day does not parse.
    """

    await store.require()
    day = parse_day(day_text)
    if day is None:
        raise QueryError(ErrorCode.invalid_argument, kind="day", value=day_text)

    return messages.day_report(loans_on_day(await store.list_all(), day))


async def query_month(store: LoanRecordStore, month_text: str) -> str:
    """Report every loan overlapping the given `YYYY.MM` month."""

    await store.require()
    month = parse_month(month_text)
    if month is None:
        raise QueryError(ErrorCode.invalid_argument, kind="month", value=month_text)

    return messages.month_report(month, loans_in_month(await store.list_all(), month))


async def list_my_loans(
        store: LoanRecordStore,
        user_id: str,
        *,
        today: date,
        requester_name: str | None = None,
) -> str:
    """List the requester's in-progress and future loans with their current record indices."""

    await store.require()
    records = actionable_records(await store.list_all(), user_id, today)
    return messages.my_loans_report(requester_name or messages.DEFAULT_REQUESTER_NAME, records)
