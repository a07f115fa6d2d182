import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiohttp import web

from .api.server import create_app
from .config import settings
from .db import init_models
from .middlewares.db import DataBaseSessionMiddleware
from .handlers import admin, admin_balance, admin_roulettes, admin_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def build_dispatcher() -> Dispatcher:
    dp = Dispatcher()

    # Session middleware
    dp.update.middleware(DataBaseSessionMiddleware())

    # Routers
    dp.include_router(admin.router)
    dp.include_router(admin_roulettes.router)
    dp.include_router(admin_balance.router)
    dp.include_router(admin_user.router)
    return dp


async def run_bot():
    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode="HTML"),
    )
    dp = build_dispatcher()

    logger.info("🤖 Admin bot starting...")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()
        logger.info("✅ Bot session closed")


async def main():
    await init_models()

    runner = web.AppRunner(create_app())
    await runner.setup()
    site = web.TCPSite(runner, settings.api_host, settings.api_port)
    await site.start()
    logger.info("🚀 API listening on %s:%s", settings.api_host, settings.api_port)

    try:
        if settings.bot_token:
            await run_bot()
        else:
            logger.info("BOT_TOKEN not set, admin bot disabled")
            await asyncio.Event().wait()
    finally:
        logger.info("🛑 Stopping API...")
        await runner.cleanup()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("⚠️ Stopped manually")
