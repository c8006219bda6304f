"""Borrow request parser.

A borrow request is the four-line form shown in the help text:

    借器材
    租用器材：相機A, 三腳架
    租用日期：2025.09.10
    歸還日期：2025.09.12

Labels may be followed by an ASCII or full-width colon, blank lines are ignored, and the equipment
list accepts ASCII or full-width commas. Parsing has no side effects.
"""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator

from loanbot.loans.dates import parse_day, start_of_day
from loanbot.loans.errors import BorrowParseError, ErrorCode
from loanbot.loans.records import canonical_items

ITEMS_LABEL = "租用器材"
BORROWED_AT_LABEL = "租用日期"
RETURNED_AT_LABEL = "歸還日期"

_COMMAND_PREFIX_RE = re.compile(r"^借器材[ \t]*", flags=re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"\r?\n")
_FIELD_LINE_RE = re.compile(
    rf"^(?P<label>{ITEMS_LABEL}|{BORROWED_AT_LABEL}|{RETURNED_AT_LABEL})\s*[:：]\s*(?P<value>.+)$"
)

_MIN_LINES = 3


class BorrowDraft(BaseModel):
    """A validated, not yet stored, borrow request."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    items: str
    borrowed_at: datetime
    returned_at: datetime

    @model_validator(mode="after")
    def validate_loan(self) -> BorrowDraft:
        """Enforce a non-empty item list and `borrowed_at <= returned_at` at day precision."""

        if not self.items:
            raise ValueError("items must not be empty")
        if start_of_day(self.returned_at) < start_of_day(self.borrowed_at):
            raise ValueError("returned_at must be >= borrowed_at")
        return self


def _strip_command(raw: str) -> str:
    return _COMMAND_PREFIX_RE.sub("", (raw or "").strip(), count=1).strip()


def _split_lines(text: str) -> list[str]:
    return [line.strip() for line in _LINE_BREAK_RE.split(text) if line.strip()]


def parse_borrow_message(raw: str) -> BorrowDraft:
    """Parse a borrow request into a `BorrowDraft`.

    Raises:
        BorrowParseError: with one of `malformed_shape`, `unparsable_line` (context `line`),
            `missing_fields`, `invalid_date_format` or `invalid_date_order`.
    """

    lines = _split_lines(_strip_command(raw))
    if len(lines) < _MIN_LINES:
        raise BorrowParseError(ErrorCode.malformed_shape)

    fields: dict[str, str] = {}
    for line in lines:
        match = _FIELD_LINE_RE.match(line)
        if not match:
            raise BorrowParseError(ErrorCode.unparsable_line, line=line)
        # Repeated labels overwrite: the last occurrence wins.
        fields[match.group("label")] = match.group("value").strip()

    if not all(fields.get(label) for label in (ITEMS_LABEL, BORROWED_AT_LABEL, RETURNED_AT_LABEL)):
        raise BorrowParseError(ErrorCode.missing_fields)

    items = canonical_items(fields[ITEMS_LABEL])
    if not items:
        raise BorrowParseError(ErrorCode.missing_fields)

    borrowed_at = parse_day(fields[BORROWED_AT_LABEL])
    returned_at = parse_day(fields[RETURNED_AT_LABEL])
    if borrowed_at is None or returned_at is None:
        raise BorrowParseError(ErrorCode.invalid_date_format)

    if start_of_day(returned_at) < start_of_day(borrowed_at):
        raise BorrowParseError(ErrorCode.invalid_date_order)

    return BorrowDraft(items=items, borrowed_at=borrowed_at, returned_at=returned_at)
