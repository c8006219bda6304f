"""Bot router composition."""

from __future__ import annotations

from aiogram import F, Router

from loanbot.bot.handlers import handle_message

router = Router(name="root")
router.message.register(handle_message, F.text)
