"""User-facing reply text (Traditional Chinese).

Only this module knows the wording of replies; the rest of the loans layer returns records,
outcomes or raises `LoanError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any

from loanbot.loans.dates import MonthSpan, coerce_to_date, format_day
from loanbot.loans.errors import ErrorCode, LoanError
from loanbot.loans.records import ActionableRecord, LoanRecord, split_items

UNKNOWN_COMMAND = "目前沒有此指令，請使用「查指令」查看指令範例"
NO_ITEMS = "（無器材資料）"
NO_BOOKINGS_ON_DAY = "暫無借用資訊，請確認工作室是否有拍攝。"
NO_ACTIONABLE_RECORDS = "您目前沒有可操作的租借記錄。"
DEFAULT_REQUESTER_NAME = "您"

HELP_TEXT = "\n".join(
    [
        "可用指令與範例：",
        "",
        "1) 借器材（請複製下方四行格式，包含「借器材」）",
        "借器材",
        "租用器材：器材一, 器材二, 器材三",
        "租用日期：2025.09.10",
        "歸還日期：2025.09.12",
        "",
        "2) 查器材 <YYYY.MM.DD> 或 <YYYY.MM>",
        "範例：查器材 2025.09.11（查特定日期）",
        "範例：查器材 2025.09（查整個月份）",
        "",
        "3) 我的租借",
        "查看您進行中與未來的租借記錄",
        "",
        "4) 刪除 <編號>",
        "取消未來的租借，或將進行中的租借改為今天提前歸還",
        "",
        "5) 查指令",
        "顯示所有指令與使用範例",
    ]
)

_ERROR_TEXT: dict[ErrorCode, str] = {
    ErrorCode.malformed_shape: "格式錯誤：請使用四行格式（借器材：租用器材／租用日期／歸還日期）",
    ErrorCode.unparsable_line: "格式錯誤：無法解析「{line}」",
    ErrorCode.missing_fields: "格式錯誤：三個欄位皆必填（租用器材／租用日期／歸還日期）",
    ErrorCode.invalid_date_format: "日期格式錯誤：請用 YYYY.MM.DD（例如 2025.09.03）",
    ErrorCode.invalid_date_order: "日期邏輯錯誤：歸還日期不可早於租用日期",
    ErrorCode.store_missing: "找不到工作表：{table}",
    ErrorCode.invalid_index: "記錄編號格式錯誤，請輸入正確的數字。",
    ErrorCode.index_out_of_range: "記錄編號 {index} 不存在，請先使用「我的租借」查看可操作的記錄。",
    ErrorCode.field_not_found: "更新租借記錄時發生錯誤，請稍後再試。",
    ErrorCode.processing_error: "處理記錄時發生錯誤，請稍後再試。",
}

_INVALID_ARGUMENT_TEXT: dict[str, str] = {
    "day": "日期格式錯誤，請用 YYYY.MM.DD",
    "month": "月份格式錯誤，請用 YYYY.MM",
}

PROCESSING_ERROR = _ERROR_TEXT[ErrorCode.processing_error]


def error_message(exc: LoanError) -> str:
    """Render a domain error as reply text."""

    if exc.code == ErrorCode.invalid_argument:
        return _INVALID_ARGUMENT_TEXT.get(exc.context.get("kind", "day"), _INVALID_ARGUMENT_TEXT["day"])

    template = _ERROR_TEXT.get(exc.code, PROCESSING_ERROR)
    try:
        return template.format(**exc.context)
    except KeyError:
        return PROCESSING_ERROR


def _day_or_raw(value: Any) -> str:
    parsed = coerce_to_date(value)
    if parsed is None:
        return str(value or "")
    return format_day(parsed)


def date_range_line(borrowed_at: Any, returned_at: Any) -> str:
    return f"📅 {_day_or_raw(borrowed_at)} ~ {_day_or_raw(returned_at)}"


def items_block(items: str, *, separator: str) -> str:
    parts = split_items(items)
    return separator.join(parts) if parts else NO_ITEMS


def booking_block(record: LoanRecord) -> str:
    """Date range, borrower name, then one equipment item per line."""

    return "\n".join(
        [
            date_range_line(record.borrowed_at, record.returned_at),
            record.display_name,
            items_block(record.items, separator="\n"),
        ]
    )


def day_report(records: Sequence[LoanRecord]) -> str:
    if not records:
        return NO_BOOKINGS_ON_DAY
    return "\n\n".join(booking_block(r) for r in records)


def month_report(month: MonthSpan, records: Sequence[LoanRecord]) -> str:
    if not records:
        return f"{month.year} / {month.month} 暫無器材借用紀錄。"
    blocks = "\n\n".join(booking_block(r) for r in records)
    return f"{month.year} / {month.month} 器材租借\n\n{blocks}"


def my_loans_report(requester_name: str, records: Sequence[ActionableRecord]) -> str:
    if not records:
        return NO_ACTIONABLE_RECORDS

    entries = "\n\n".join(
        f"[{rank}] {_day_or_raw(a.record.borrowed_at)} ~ {_day_or_raw(a.record.returned_at)}\n"
        f"{items_block(a.record.items, separator=', ')}"
        for rank, a in enumerate(records, start=1)
    )
    hint = "輸入「刪除 <編號>」即可取消或提前歸還\n例如：刪除 1"
    return f"📋 {requester_name}的租借記錄\n\n{entries}\n\n{hint}"


def borrow_confirmation(username: str, items: str, borrowed_at: date, returned_at: date) -> str:
    return "\n".join(
        [
            "✅ 已建立借用紀錄：",
            f"借用人：{username}",
            f"器材：{items}",
            f"租用日期：{format_day(borrowed_at)}",
            f"歸還日期：{format_day(returned_at)}",
        ]
    )


def cancellation_confirmation(borrowed_at: date, returned_at: date, items: str) -> str:
    return "\n".join(
        [
            "✅ 已取消未來租借記錄",
            "",
            f"📅 {format_day(borrowed_at)} ~ {format_day(returned_at)}",
            items_block(items, separator=", "),
            "",
            "記錄已從系統中移除。",
        ]
    )


def early_return_confirmation(borrowed_at: date, returned_at: date, items: str) -> str:
    return "\n".join(
        [
            "✅ 已提前歸還器材",
            "",
            f"📅 {format_day(borrowed_at)} ~ {format_day(returned_at)}",
            items_block(items, separator=", "),
            "",
            "租借期間已調整為提前歸還。",
        ]
    )
