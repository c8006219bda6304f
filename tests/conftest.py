"""Pytest configuration.

Ensures tests can import `loanbot` without installing the package and provides shared fixtures
built on the in-memory row store from `tests.fakes`.
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure `import loanbot...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from loanbot.loans.store import LoanRecordStore  # noqa: E402
from tests.fakes import MemoryRowStore  # noqa: E402


@pytest.fixture
def memory_rows() -> MemoryRowStore:
    return MemoryRowStore()


@pytest.fixture
def loan_store(memory_rows: MemoryRowStore) -> LoanRecordStore:
    return LoanRecordStore(memory_rows)


@pytest.fixture
def today() -> date:
    return date(2025, 9, 15)
