"""Domain error taxonomy.

Every failure a chat user can trigger is raised as a `LoanError` carrying an `ErrorCode` and the
context needed to explain it. The bot handler converts these into reply text; none of them is fatal.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Stable reason codes for rejected requests."""

    malformed_shape = "malformed_shape"
    unparsable_line = "unparsable_line"
    missing_fields = "missing_fields"
    invalid_date_format = "invalid_date_format"
    invalid_date_order = "invalid_date_order"

    store_missing = "store_missing"
    invalid_argument = "invalid_argument"

    invalid_index = "invalid_index"
    index_out_of_range = "index_out_of_range"
    field_not_found = "field_not_found"
    processing_error = "processing_error"


class LoanError(ValueError):
    """Base class for recoverable, user-facing loan errors."""

    def __init__(self, code: ErrorCode, **context: Any) -> None:
        super().__init__(code.value)
        self.code = code
        self.context = context

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, context={self.context!r})"


class BorrowParseError(LoanError):
    """Raised when a borrow request does not follow the four-line form."""


class QueryError(LoanError):
    """Raised when a day/month query argument cannot be used."""


class DeletionError(LoanError):
    """Raised when a cancel/early-return request cannot be applied."""


class StoreError(LoanError):
    """Raised when the loans table is missing or lacks a required column."""
