"""Display-name lookup for chat users.

Lookups are best effort: a failure is logged and reported as `None` so the caller can fall back to
the raw user id or a generic pronoun.
"""

from __future__ import annotations

import logging
from typing import Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

logger = logging.getLogger(__name__)


class ProfileLookup(Protocol):
    async def get_display_name(self, user_id: str) -> str | None:
        """Return the user's display name, or `None` if unavailable."""


class TelegramProfiles:
    """Resolve display names through `Bot.get_chat` (private chat id == user id)."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def get_display_name(self, user_id: str) -> str | None:
        if not user_id or user_id == "unknown":
            return None
        try:
            chat = await self._bot.get_chat(int(user_id))
        except (TelegramAPIError, ValueError) as exc:
            logger.info("profile lookup failed user=%s reason=%s", user_id, exc)
            return None
        return chat.full_name or chat.username or None
