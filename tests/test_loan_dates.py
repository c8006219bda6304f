"""Tests for the dot-delimited date grammar."""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest

from loanbot.loans.dates import (
    coerce_to_date,
    format_day,
    parse_day,
    parse_month,
    start_of_day,
    today_in,
)


@pytest.mark.parametrize("text", ["2025.09.03", "2024.02.29", "0001.01.01", "9999.12.31"])
def test_parse_and_format_day_round_trip(text: str) -> None:
    assert format_day(parse_day(text)) == text


def test_parse_day_is_midnight() -> None:
    assert parse_day("2025.09.10") == datetime(2025, 9, 10, 0, 0)
    assert parse_day(" 2025.09.10 ") == datetime(2025, 9, 10)


@pytest.mark.parametrize(
    "text",
    ["2025-09-03", "2025/09/03", "2025.9.3", "", None, "2025.09.3", "25.09.03", "2025.02.30", "２０２５.０９.０３"],
)
def test_parse_day_rejects_other_shapes(text: str | None) -> None:
    assert parse_day(text) is None


def test_format_day_pads_dates_and_datetimes() -> None:
    assert format_day(date(2025, 1, 2)) == "2025.01.02"
    assert format_day(datetime(2025, 1, 2, 18, 30)) == "2025.01.02"


@pytest.mark.parametrize(
    ("text", "last_day"),
    [("2025.02", 28), ("2024.02", 29), ("1900.02", 28), ("2000.02", 29), ("2025.04", 30), ("2025.12", 31)],
)
def test_parse_month_bounds(text: str, last_day: int) -> None:
    month = parse_month(text)
    assert month is not None
    assert month.start == datetime(month.year, month.month, 1)
    assert month.end == datetime(month.year, month.month, last_day)


@pytest.mark.parametrize("text", ["2025.13", "2025.00", "2025.1", "2025-10", "2025.10.01", ""])
def test_parse_month_rejects_invalid(text: str) -> None:
    assert parse_month(text) is None


def test_start_of_day_truncates_without_mutating() -> None:
    original = datetime(2025, 9, 10, 17, 45, 12)
    truncated = start_of_day(original)
    assert truncated == datetime(2025, 9, 10)
    assert original == datetime(2025, 9, 10, 17, 45, 12)
    assert start_of_day(date(2025, 9, 10)) == datetime(2025, 9, 10)


def test_start_of_day_drops_timezone() -> None:
    aware = datetime(2025, 9, 10, 23, 0, tzinfo=UTC)
    assert start_of_day(aware) == datetime(2025, 9, 10)


def test_coerce_passes_native_values_through_unchanged() -> None:
    # Native values are not normalised: time-of-day and tzinfo survive.
    value = datetime(2025, 9, 10, 13, 0, tzinfo=UTC)
    assert coerce_to_date(value) is value
    day = date(2025, 9, 10)
    assert coerce_to_date(day) is day


@pytest.mark.parametrize("value", [None, "", 0, False, "qwerty", [], object()])
def test_coerce_returns_none_for_blank_or_unparseable(value: object) -> None:
    assert coerce_to_date(value) is None


def test_coerce_parses_strings_and_timestamps() -> None:
    parsed = coerce_to_date("2025-09-10")
    assert parsed is not None
    assert start_of_day(parsed) == datetime(2025, 9, 10)

    taipei_noon = datetime(2025, 9, 10, 12, tzinfo=ZoneInfo("Asia/Taipei"))
    assert coerce_to_date(taipei_noon.timestamp()) == datetime(2025, 9, 10, 12)


@pytest.mark.parametrize(
    ("text", "timezone", "expected"),
    [
        ("2025-09-09T16:00:00.000Z", "Asia/Taipei", datetime(2025, 9, 10, 0, 0)),
        ("2025-09-09T16:00:00.000Z", "UTC", datetime(2025, 9, 9, 16, 0)),
        ("2025-09-10 09:30", "Europe/Berlin", datetime(2025, 9, 10, 9, 30)),
    ],
)
def test_coerce_reads_strings_in_bot_timezone(text: str, timezone: str, expected: datetime) -> None:
    assert coerce_to_date(text, timezone=timezone) == expected


def test_today_in_is_midnight() -> None:
    today = today_in("Asia/Taipei")
    assert (today.hour, today.minute, today.second, today.microsecond) == (0, 0, 0, 0)
    assert today.tzinfo is None
