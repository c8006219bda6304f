"""Row-store contract.

A row store is a single table with a header (its ordered column names) and data rows kept in
insertion order. Rows are addressed by their 0-based position among the data rows; deleting a row
shifts every later row up by one, so positions are only meaningful within a single request.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol


class RowStoreError(RuntimeError):
    """Raised when the backing store fails to read or write."""


class RowStore(Protocol):
    """Async interface implemented by every row-store backend."""

    name: str

    async def exists(self) -> bool:
        """Whether the table exists."""

    async def header(self) -> list[str]:
        """Ordered column names (empty if the table does not exist)."""

    async def list_rows(self) -> list[tuple[Any, ...]]:
        """All data rows in storage order, aligned with `header()`."""

    async def append_row(self, values: Sequence[Any]) -> None:
        """Append one row at the end."""

    async def set_cell(self, position: int, column: str, value: Any) -> None:
        """Overwrite one cell of the row at `position`."""

    async def delete_row(self, position: int) -> None:
        """Delete the row at `position`."""

    async def ensure_header(self, columns: Sequence[str]) -> bool:
        """Create or reset the table so its header equals `columns`.

        Returns:
            `True` if the table was created or reset, `False` if it already matched.
        """
