import asyncio
import logging
import sys

# Configure logging first
logging.basicConfig(level=logging.INFO, stream=sys.stdout)

from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.client.bot import DefaultBotProperties
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from aiohttp import web

from .config import settings
from .data.funnel_quiz_data import funnel_title, question_definitions_funnel
from .database.models import Base
from .database.session import create_db_engine, create_session_maker
from .handlers import start, quiz
from .services.catalog_service import CatalogService, seed_questionnaire
from .services.quiz_session import SessionRegistry


async def init_catalog(catalog_service: CatalogService):
    """ Creates tables, seeds the default funnel quiz if missing and loads all catalogs into memory. """
    logging.info("Initializing database...")
    engine = create_db_engine(settings.database_url)
    session_maker = create_session_maker(engine)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        await seed_questionnaire(session_maker, funnel_title, question_definitions_funnel)

        async with session_maker() as session:
            await catalog_service.load_from_db(session)
    finally:
        await engine.dispose()

    if catalog_service.get_catalog(settings.QUIZ_TITLE) is None:
        logging.warning(f"Questionnaire '{settings.QUIZ_TITLE}' not found; the quiz will be unavailable.")
    logging.info("Database initialization complete.")


async def on_startup_webhook(bot: Bot, catalog_service: CatalogService):
    await init_catalog(catalog_service)
    webhook_url = f"{settings.WEBHOOK_HOST}{settings.WEBHOOK_PATH}"
    await bot.set_webhook(webhook_url)
    logging.info(f"Telegram Webhook set to {webhook_url}")


async def on_shutdown_webhook(bot: Bot):
    logging.info("Shutting down and deleting Telegram webhook...")
    await bot.delete_webhook()
    logging.info("Telegram Webhook deleted.")


async def start_polling(dp: Dispatcher, bot: Bot):
    logging.info("Starting bot in polling mode...")
    dp.startup.register(init_catalog)
    await bot.delete_webhook(drop_pending_updates=True)
    await dp.start_polling(bot)


def main() -> None:
    bot = Bot(token=settings.BOT_TOKEN.get_secret_value(), default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()

    # Shared objects are handed to handlers by name through workflow data
    dp["catalog_service"] = CatalogService()
    dp["quiz_sessions"] = SessionRegistry()

    dp.include_router(start.router)
    dp.include_router(quiz.router)

    if settings.WEBHOOK_HOST:
        logging.info("Starting bot in webhook mode...")
        dp.startup.register(on_startup_webhook)
        dp.shutdown.register(on_shutdown_webhook)

        app = web.Application()

        webhook_requests_handler = SimpleRequestHandler(dispatcher=dp, bot=bot)
        webhook_requests_handler.register(app, path=settings.WEBHOOK_PATH)

        setup_application(app, dp, bot=bot)

        web.run_app(app, host=settings.WEB_SERVER_HOST, port=settings.WEB_SERVER_PORT)
    else:
        asyncio.run(start_polling(dp, bot))


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        logging.info("Bot stopped.")
