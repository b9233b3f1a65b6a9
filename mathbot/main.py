"""MathBot entry point: polling bot with startup and shutdown hooks."""

import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

from mathbot.config import settings
from mathbot.database import close_db, init_db
from mathbot.handlers import setup_routers
from mathbot.middlewares import LoggingMiddleware
from mathbot.services.openrouter import openrouter_client

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand(command="start", description="Start or restart the bot"),
    BotCommand(command="mcq", description="Solve a multiple-choice question"),
    BotCommand(command="essay", description="Solve a free-form question"),
    BotCommand(command="history", description="Past questions"),
    BotCommand(command="new", description="Leave the current conversation"),
    BotCommand(command="language", description="Answer language"),
    BotCommand(command="theme", description="Mini App theme"),
    BotCommand(command="reset", description="Delete all my data"),
    BotCommand(command="help", description="How to use the bot"),
]


async def on_startup(bot: Bot) -> None:
    await init_db()
    logger.info(f"Database ready ({'sqlite' if settings.is_sqlite else 'external'})")

    if not openrouter_client.is_configured:
        logger.warning("OPENROUTER_API_KEY is not set, solving is disabled")
    else:
        logger.info(f"Solving with {openrouter_client.model}")

    await bot.set_my_commands(BOT_COMMANDS)

    me = await bot.get_me()
    logger.info(f"Bot started: @{me.username}")


async def on_shutdown(bot: Bot) -> None:
    await openrouter_client.close()
    await close_db()
    logger.info("Bot stopped")


def create_dispatcher() -> Dispatcher:
    """Dispatcher with hooks, middlewares and all routers attached."""
    # FSM state lives in memory; history and preferences are in the database
    dp = Dispatcher(storage=MemoryStorage())

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    logging_middleware = LoggingMiddleware()
    dp.message.middleware(logging_middleware)
    dp.callback_query.middleware(logging_middleware)

    dp.include_router(setup_routers())
    return dp


async def main() -> None:
    # No default parse mode: answers contain "<" and "&" from math expressions
    bot = Bot(token=settings.telegram_bot_token)
    dp = create_dispatcher()

    logger.info("Starting polling...")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")


if __name__ == "__main__":
    run()
