"""aiogram message handler.

Every text message gets exactly one reply. Domain errors (`LoanError`) become their own reply
text; any other failure is logged and answered with the generic processing-error text. The loans
table header is checked once per message, before any command runs.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from time import monotonic

from aiogram.types import Message

from loanbot.app import App
from loanbot.bot.delivery import deliver
from loanbot.loans import messages
from loanbot.loans.borrow import parse_borrow_message
from loanbot.loans.commands import Command, CommandKind, parse_command
from loanbot.loans.dates import today_in
from loanbot.loans.deletion import delete_loan
from loanbot.loans.errors import LoanError
from loanbot.loans.queries import list_my_loans, query_day, query_month
from loanbot.loans.records import LoanRecord

logger = logging.getLogger(__name__)

UNKNOWN_USER = "unknown"


def _requester_id(message: Message) -> str:
    user = message.from_user
    if user is None:
        return UNKNOWN_USER
    return str(user.id)


async def _handle_borrow(app: App, raw_text: str, user_id: str) -> str:
    await app.loans.require()
    draft = parse_borrow_message(raw_text)

    username = await app.profiles.get_display_name(user_id) or user_id
    record = LoanRecord(
        ts=datetime.now(UTC),
        user_id=user_id,
        username=username,
        items=draft.items,
        borrowed_at=draft.borrowed_at,
        returned_at=draft.returned_at,
    )
    async with app.write_lock:
        await app.loans.append(record)

    logger.info("loan created user=%s items=%d", user_id, len(draft.items.split(", ")))
    return messages.borrow_confirmation(username, draft.items, draft.borrowed_at, draft.returned_at)


async def _handle_delete(app: App, index: str | None, user_id: str) -> str:
    async with app.write_lock:
        # Indices are ranks over the current table, so they are resolved under the lock.
        outcome = await delete_loan(
            app.loans,
            user_id,
            index,
            today=today_in(app.settings.timezone),
        )
    return outcome.message()


async def dispatch(command: Command, app: App, user_id: str) -> str:
    """Run one command and return the reply text."""

    if command.kind == CommandKind.help:
        return messages.HELP_TEXT
    if command.kind == CommandKind.borrow:
        return await _handle_borrow(app, command.argument or "", user_id)
    if command.kind == CommandKind.query_day:
        return await query_day(app.loans, command.argument or "")
    if command.kind == CommandKind.query_month:
        return await query_month(app.loans, command.argument or "")
    if command.kind == CommandKind.my_loans:
        return await list_my_loans(
            app.loans,
            user_id,
            today=today_in(app.settings.timezone),
            requester_name=await app.profiles.get_display_name(user_id),
        )
    if command.kind == CommandKind.delete:
        return await _handle_delete(app, command.argument, user_id)
    return messages.UNKNOWN_COMMAND


async def handle_message(message: Message, app: App) -> None:
    """Handle an incoming Telegram message and send exactly one reply."""

    raw_text = message.text or ""
    if not raw_text.strip():
        # Stickers, photos and other non-text updates are ignored.
        return

    started = monotonic()
    user_id = _requester_id(message)
    command = parse_command(raw_text)

    # noinspection PyBroadException
    try:
        await app.loans.ensure_schema()
        reply = await dispatch(command, app, user_id)
        latency_ms = int((monotonic() - started) * 1000)
        logger.info("handled command=%s latency_ms=%d", command.kind, latency_ms)
    except LoanError as exc:
        latency_ms = int((monotonic() - started) * 1000)
        logger.info("rejected command=%s code=%s latency_ms=%d", command.kind, exc.code, latency_ms)
        reply = messages.error_message(exc)
    except Exception:
        # Handler boundary: internal failures get the generic reply without details.
        logger.exception("handler failed command=%s", command.kind)
        reply = messages.PROCESSING_ERROR

    await deliver(message, reply, max_length=app.settings.reply_max_length)
