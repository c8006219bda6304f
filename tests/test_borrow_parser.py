"""Tests for the four-line borrow request parser."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from loanbot.loans.borrow import BorrowDraft, parse_borrow_message
from loanbot.loans.errors import BorrowParseError, ErrorCode


def _form(items: str = "相機A, 三腳架, 燈具", start: str = "2025.09.10", end: str = "2025.09.12") -> str:
    return f"借器材\n租用器材：{items}\n租用日期：{start}\n歸還日期：{end}"


def _reason(text: str) -> ErrorCode:
    with pytest.raises(BorrowParseError) as exc_info:
        parse_borrow_message(text)
    return exc_info.value.code


def test_parse_full_form() -> None:
    draft = parse_borrow_message(_form())
    assert draft.items == "相機A, 三腳架, 燈具"
    assert draft.borrowed_at == datetime(2025, 9, 10)
    assert draft.returned_at == datetime(2025, 9, 12)


def test_parse_accepts_ascii_colons_full_width_commas_and_blank_lines() -> None:
    text = "借器材  \r\n\n租用器材: 相機A，三腳架 ,, 燈具 \n\n租用日期 : 2025.09.10\r\n歸還日期：2025.09.12\n"
    draft = parse_borrow_message(text)
    assert draft.items == "相機A, 三腳架, 燈具"


def test_parse_keyword_on_same_line_as_first_field() -> None:
    draft = parse_borrow_message("借器材 租用器材：相機A\n租用日期：2025.09.10\n歸還日期：2025.09.10")
    assert draft.items == "相機A"


def test_single_day_loan_is_allowed() -> None:
    draft = parse_borrow_message(_form(start="2025.09.10", end="2025.09.10"))
    assert draft.borrowed_at == draft.returned_at


def test_return_before_borrow_is_rejected() -> None:
    assert _reason(_form(start="2025.09.12", end="2025.09.10")) == ErrorCode.invalid_date_order


def test_too_few_lines_is_malformed() -> None:
    assert _reason("借器材\n租用器材：相機A\n租用日期：2025.09.10") == ErrorCode.malformed_shape
    assert _reason("借器材") == ErrorCode.malformed_shape


def test_unknown_line_is_reported_with_its_text() -> None:
    with pytest.raises(BorrowParseError) as exc_info:
        parse_borrow_message(_form() + "\n備註：小心輕放")
    assert exc_info.value.code == ErrorCode.unparsable_line
    assert exc_info.value.context["line"] == "備註：小心輕放"


def test_duplicate_label_last_wins_and_missing_label_is_reported() -> None:
    text = "借器材\n租用器材：相機A\n租用器材：三腳架\n租用日期：2025.09.10"
    assert _reason(text) == ErrorCode.missing_fields

    text = "借器材\n租用器材：相機A\n租用器材：三腳架\n租用日期：2025.09.10\n歸還日期：2025.09.11"
    assert parse_borrow_message(text).items == "三腳架"


def test_blank_equipment_list_counts_as_missing() -> None:
    assert _reason(_form(items=", ，,")) == ErrorCode.missing_fields


@pytest.mark.parametrize(
    ("start", "end"),
    [("2025-09-10", "2025.09.12"), ("2025.09.10", "2025/09/12"), ("2025.9.10", "2025.09.12"), ("2025.02.30", "2025.03.01")],
)
def test_bad_date_format(start: str, end: str) -> None:
    assert _reason(_form(start=start, end=end)) == ErrorCode.invalid_date_format


def test_draft_model_validates_fields() -> None:
    with pytest.raises(ValidationError):
        BorrowDraft(items="相機A", borrowed_at=datetime(2025, 9, 12), returned_at=datetime(2025, 9, 10))
    with pytest.raises(ValidationError):
        BorrowDraft(items="  ", borrowed_at=datetime(2025, 9, 10), returned_at=datetime(2025, 9, 10))
