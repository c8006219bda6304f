"""Tests for the loan-level store facade and row mapping."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from loanbot.loans.records import LOAN_COLUMNS, LoanRecord, canonical_items, record_from_row, split_items
from loanbot.loans.store import LoanRecordStore
from tests.fakes import MemoryRowStore, loan_row


@pytest.mark.asyncio
async def test_ensure_schema_is_idempotent() -> None:
    memory = MemoryRowStore(rows=[loan_row("A", date(2025, 9, 1), date(2025, 9, 2))])
    store = LoanRecordStore(memory)

    await store.ensure_schema()
    await store.ensure_schema()

    assert memory.writes == []
    assert len(memory.rows) == 1


@pytest.mark.asyncio
async def test_ensure_schema_creates_missing_table() -> None:
    memory = MemoryRowStore(header=None)
    store = LoanRecordStore(memory)
    assert not await store.exists()

    await store.ensure_schema()

    assert await store.exists()
    assert await memory.header() == list(LOAN_COLUMNS)


@pytest.mark.asyncio
async def test_ensure_schema_resets_on_reordered_header() -> None:
    reordered = ("userId", "ts", "username", "items", "borrowedAt", "returnedAt")
    memory = MemoryRowStore(header=reordered, rows=[("A", "ts", "n", "i", "", "")])

    await LoanRecordStore(memory).ensure_schema()

    assert memory.writes == [("reset", LOAN_COLUMNS)]
    assert memory.rows == []


@pytest.mark.asyncio
async def test_append_then_list_all_preserves_order(loan_store: LoanRecordStore, memory_rows: MemoryRowStore) -> None:
    first = LoanRecord(
        ts=datetime(2025, 9, 1, 8, 0),
        user_id="A",
        username="Amy",
        items="相機A, 三腳架",
        borrowed_at=datetime(2025, 9, 10),
        returned_at=datetime(2025, 9, 12),
    )
    second = LoanRecord(
        ts=datetime(2025, 9, 1, 9, 0),
        user_id="B",
        username="Bob",
        items="燈具",
        borrowed_at=datetime(2025, 9, 11),
        returned_at=datetime(2025, 9, 11),
    )

    await loan_store.append(first)
    await loan_store.append(second)

    records = await loan_store.list_all()
    assert [r.user_id for r in records] == ["A", "B"]
    # Day cells are stored as plain dates.
    assert records[0].borrowed_at == date(2025, 9, 10)
    assert memory_rows.writes[0][0] == "append"


def test_record_from_row_maps_by_header_name() -> None:
    header = ("returnedAt", "userId", "items", "borrowedAt")
    record = record_from_row(header, (date(2025, 9, 2), 12345, "燈具", date(2025, 9, 1)))
    assert record.user_id == "12345"
    assert record.username == ""
    assert record.ts == ""
    assert record.display_name == "12345"
    assert record.borrowed_at == date(2025, 9, 1)


def test_record_from_row_tolerates_short_rows() -> None:
    record = record_from_row(LOAN_COLUMNS, ("ts", "A"))
    assert record.user_id == "A"
    assert record.returned_at == ""


def test_items_split_and_canonical_form() -> None:
    assert split_items("相機A，三腳架 , ,燈具") == ["相機A", "三腳架", "燈具"]
    assert canonical_items(" a ,b，c ") == "a, b, c"
    assert canonical_items(" , ，") == ""
