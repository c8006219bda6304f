"""Reply delivery.

Replies are fire-and-forget: text is cut to the platform limit and transport failures are logged,
never raised back into the handler.
"""

from __future__ import annotations

import logging
from typing import Protocol

from aiogram.exceptions import TelegramAPIError

logger = logging.getLogger(__name__)

# Telegram sendMessage accepts at most 4096 characters.
DEFAULT_MAX_LENGTH = 4096


class Replyable(Protocol):
    async def answer(self, text: str) -> object: ...


def truncate(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    return str(text)[:max_length]


async def deliver(message: Replyable, text: str, *, max_length: int = DEFAULT_MAX_LENGTH) -> bool:
    """Send `text` as a reply to `message`; return whether the transport accepted it."""

    # noinspection PyBroadException
    try:
        await message.answer(truncate(text, max_length))
    except TelegramAPIError as exc:
        logger.warning("reply rejected by Telegram: %s", exc)
        return False
    except Exception:
        logger.exception("reply delivery failed")
        return False
    return True
