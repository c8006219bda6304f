"""Chat command recognition.

Commands are matched on the stripped message text in a fixed precedence order; the first match
wins:
    1. `查指令`                     help
    2. `借器材...` (multi-line)       borrow, raw text kept with its line breaks
    3. `查器材 YYYY.MM.DD|YYYY.MM`   day/month query, whitespace runs collapsed first
    4. `我的租借`                    list own loans
    5. `刪除 N`                      cancel / early return
    6. anything else                unknown
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class CommandKind(StrEnum):
    help = "help"
    borrow = "borrow"
    query_day = "query_day"
    query_month = "query_month"
    my_loans = "my_loans"
    delete = "delete"
    unknown = "unknown"


@dataclass(frozen=True)
class Command:
    """A recognised command and its raw argument (if any)."""

    kind: CommandKind
    argument: str | None = None


_HELP_RE = re.compile(r"^查指令$")
_BORROW_RE = re.compile(r"^借器材", flags=re.IGNORECASE)
_QUERY_DAY_RE = re.compile(r"^查器材 (?P<day>[0-9]{4}\.[0-9]{2}\.[0-9]{2})$")
_QUERY_MONTH_RE = re.compile(r"^查器材 (?P<month>[0-9]{4}\.[0-9]{2})$")
_MY_LOANS_RE = re.compile(r"^我的租借$")
_DELETE_RE = re.compile(r"^刪除 (?P<index>[0-9]+)$")
_MULTISPACE_RE = re.compile(r"\s+")


def parse_command(text: str) -> Command:
    """Classify a chat message."""

    raw = (text or "").strip()

    if _HELP_RE.match(raw):
        return Command(CommandKind.help)

    # Borrow requests span several lines, so they are matched before whitespace is collapsed.
    if _BORROW_RE.match(raw):
        return Command(CommandKind.borrow, raw)

    collapsed = _MULTISPACE_RE.sub(" ", raw)

    match = _QUERY_DAY_RE.match(collapsed)
    if match:
        return Command(CommandKind.query_day, match.group("day"))

    match = _QUERY_MONTH_RE.match(collapsed)
    if match:
        return Command(CommandKind.query_month, match.group("month"))

    if _MY_LOANS_RE.match(collapsed):
        return Command(CommandKind.my_loans)

    match = _DELETE_RE.match(collapsed)
    if match:
        return Command(CommandKind.delete, match.group("index"))

    return Command(CommandKind.unknown)
