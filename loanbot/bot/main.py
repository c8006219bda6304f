"""Bot process entrypoint."""

from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from loanbot.app import create_app
from loanbot.bot.profiles import TelegramProfiles
from loanbot.bot.router import router
from loanbot.config.logging import configure_logging
from loanbot.config.settings import load_settings

logger = logging.getLogger(__name__)


async def main() -> None:
    """Run the Telegram bot polling loop."""

    settings = load_settings()
    configure_logging()

    bot = Bot(token=settings.telegram_bot_token, default=DefaultBotProperties(parse_mode=None))
    app = create_app(settings, profiles=TelegramProfiles(bot))
    await app.pool.open(wait=True)

    dp = Dispatcher()
    dp.include_router(router)

    try:
        logger.info("polling table=%s timezone=%s", settings.loans_table, settings.timezone)
        await dp.start_polling(bot, app=app)
    finally:
        logger.info("shutting down")
        await app.pool.close()
        await bot.session.close()


def run() -> None:
    """Console-script entry point."""

    asyncio.run(main())


if __name__ == "__main__":
    run()
