"""Bot process entrypoint: `python -m src.bot.main`."""

from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.types import BotCommand

from src.app import App, create_app
from src.bot.router import router
from src.config.logging import configure_logging
from src.config.settings import load_settings

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand(command="start", description="How to describe the cards you want"),
    BotCommand(command="help", description="Show usage"),
]


async def _open_pool(app: App) -> None:
    if app.pool is None:
        return
    await asyncio.to_thread(app.pool.open, True)
    logger.info("concept pool opened")


async def _close_pool(app: App) -> None:
    if app.pool is None:
        return
    await asyncio.to_thread(app.pool.close)


async def main() -> None:
    """Translate every chat message into a card search query until interrupted."""

    configure_logging()
    settings = load_settings()
    token = settings.telegram_bot_token
    if not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required to run the bot")

    app = create_app(settings)
    await _open_pool(app)

    bot = Bot(token=token, default=DefaultBotProperties(parse_mode=None))
    dispatcher = Dispatcher()
    dispatcher.include_router(router)

    try:
        await bot.set_my_commands(BOT_COMMANDS)
        logger.info("polling validate_with_search=%s concept_db=%s", settings.validate_with_search, app.pool is not None)
        await dispatcher.start_polling(bot, app=app)
    finally:
        await _close_pool(app)
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
