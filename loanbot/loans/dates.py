"""Dot-delimited date grammar (`YYYY.MM.DD` days and `YYYY.MM` months).

All comparisons happen at day precision on naive datetimes truncated to midnight:
    - a loan occupies every day in `[borrowedAt, returnedAt]` (both inclusive),
    - "today" is the current calendar day in the configured bot timezone.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo

import dateparser
from dateparser.conf import Settings as DateparserSettings

_DAY_RE = re.compile(r"^(?P<y>[0-9]{4})\.(?P<m>[0-9]{2})\.(?P<d>[0-9]{2})$")
_MONTH_RE = re.compile(r"^(?P<y>[0-9]{4})\.(?P<m>[0-9]{2})$")

DEFAULT_TIMEZONE = "Asia/Taipei"


@lru_cache(maxsize=8)
def _dateparser_settings(timezone: str) -> DateparserSettings:
    # Naive strings are read in `timezone`; strings with an offset or `Z` are converted to it.
    return DateparserSettings().replace(
        STRICT_PARSING=True,
        DATE_ORDER="YMD",
        TIMEZONE=timezone,
        TO_TIMEZONE=timezone,
        RETURN_AS_TIMEZONE_AWARE=False,
    )


@dataclass(frozen=True)
class MonthSpan:
    """A calendar month with its first and last day (both at midnight)."""

    year: int
    month: int
    start: datetime
    end: datetime


def parse_day(text: str | None) -> datetime | None:
    """Parse `YYYY.MM.DD` into a midnight datetime.

    Returns `None` for any other shape (other separators, missing zero padding) and for dates that
    do not exist on the calendar.
    """

    match = _DAY_RE.match((text or "").strip())
    if not match:
        return None
    try:
        return datetime(int(match.group("y")), int(match.group("m")), int(match.group("d")))
    except ValueError:
        return None


def format_day(value: date) -> str:
    """Format a date (or datetime) as zero-padded `YYYY.MM.DD`."""

    return f"{value.year:04d}.{value.month:02d}.{value.day:02d}"


def parse_month(text: str | None) -> MonthSpan | None:
    """Parse `YYYY.MM` into the month's first and last calendar day."""

    match = _MONTH_RE.match((text or "").strip())
    if not match:
        return None

    year = int(match.group("y"))
    month = int(match.group("m"))
    if not 1 <= month <= 12 or year < 1:
        return None

    last_day = calendar.monthrange(year, month)[1]
    return MonthSpan(
        year=year,
        month=month,
        start=datetime(year, month, 1),
        end=datetime(year, month, last_day),
    )


def start_of_day(value: date) -> datetime:
    """Return a new naive datetime at midnight of the value's calendar day."""

    if isinstance(value, datetime):
        return datetime.combine(value.date(), time.min)
    return datetime.combine(value, time.min)


def coerce_to_date(value: Any, *, timezone: str = DEFAULT_TIMEZONE) -> date | None:
    """Best-effort conversion of a stored cell into a date value.

    Native `date`/`datetime` values are returned as-is, including any time-of-day or tzinfo they
    carry. Strings go through `dateparser` and numbers are POSIX timestamps; both come back as
    naive wall-clock time in `timezone`. Blank or unparseable input yields `None`.
    """

    if isinstance(value, date):
        return value
    if not value or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, ZoneInfo(timezone)).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        return dateparser.parse(value.strip(), settings=_dateparser_settings(timezone))
    return None


def today_in(timezone: str) -> datetime:
    """Midnight of the current calendar day in `timezone` (naive)."""

    return start_of_day(datetime.now(ZoneInfo(timezone)))
