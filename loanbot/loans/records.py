"""Loan record model and row conversion helpers.

A loan is stored as one row with the columns in `LOAN_COLUMNS`. Rows read back from the store are
not trusted: the two date cells may hold native dates, strings or blanks, so they are kept as raw
values here and interpreted through `coerce_to_date` by the query and deletion code.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from loanbot.loans.dates import coerce_to_date, start_of_day

LOAN_COLUMNS: tuple[str, ...] = ("ts", "userId", "username", "items", "borrowedAt", "returnedAt")

RETURNED_AT_COLUMN = "returnedAt"

_ITEM_SEPARATOR_RE = re.compile(r"[,，]")


@dataclass(frozen=True)
class LoanRecord:
    """One loan row, in storage column order."""

    ts: Any
    user_id: str
    username: str
    items: str
    borrowed_at: Any
    returned_at: Any

    def to_row(self) -> tuple[Any, ...]:
        """Row values aligned with `LOAN_COLUMNS`."""

        return (
            self.ts,
            self.user_id,
            self.username,
            self.items,
            _as_date(self.borrowed_at),
            _as_date(self.returned_at),
        )

    @property
    def display_name(self) -> str:
        return self.username or self.user_id


@dataclass(frozen=True)
class ActionableRecord:
    """A requester's in-progress or future loan plus its live storage position."""

    record: LoanRecord
    position: int


def _as_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    return value


def _cell(row: Sequence[Any], index: int) -> Any:
    if index < 0 or index >= len(row):
        return ""
    return row[index]


def record_from_row(header: Sequence[str], row: Sequence[Any]) -> LoanRecord:
    """Map a raw row to a `LoanRecord` by header name (missing columns read as "")."""

    header = list(header)

    def cell(name: str) -> Any:
        return _cell(row, header.index(name) if name in header else -1)

    user_id = cell("userId")
    username = cell("username")
    items = cell("items")
    return LoanRecord(
        ts=cell("ts"),
        user_id="" if user_id is None else str(user_id),
        username="" if username is None else str(username),
        items="" if items is None else str(items),
        borrowed_at=cell("borrowedAt"),
        returned_at=cell("returnedAt"),
    )


def split_items(items: str) -> list[str]:
    """Split an equipment list on ASCII or full-width commas, dropping blanks."""

    return [part.strip() for part in _ITEM_SEPARATOR_RE.split(items or "") if part.strip()]


def canonical_items(items: str) -> str:
    """Canonical stored form of an equipment list (`"a, b, c"`)."""

    return ", ".join(split_items(items))


def actionable_records(
        records: Sequence[LoanRecord],
        user_id: str,
        today: date,
) -> list[ActionableRecord]:
    """Return the requester's loans that have not ended before `today`, in storage order.

    The 1-based rank of an entry in this list is the "record index" a user types to cancel or
    return a loan. Positions shift whenever rows are added or removed, so the list must be rebuilt
    on every request.
    """

    cutoff = start_of_day(today)
    actionable: list[ActionableRecord] = []
    for position, record in enumerate(records):
        if record.user_id != user_id:
            continue
        returned_at = coerce_to_date(record.returned_at)
        if returned_at is None or start_of_day(returned_at) < cutoff:
            continue
        actionable.append(ActionableRecord(record=record, position=position))
    return actionable
