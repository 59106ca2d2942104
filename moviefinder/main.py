"""Application entrypoint."""

from __future__ import annotations

import asyncio

import httpx
from aiogram import Bot, Dispatcher
from aiogram.client.session.aiohttp import AiohttpSession

from moviefinder.bot.middlewares import ChatContextMiddleware, ThrottleMiddleware
from moviefinder.bot.routers import setup_routers
from moviefinder.bot.sessions import SearchSessionRegistry
from moviefinder.config import get_settings
from moviefinder.logging import configure_logging, logger
from moviefinder.services.catalog import MovieCatalogService
from moviefinder.services.error_monitor import ErrorMonitor


async def main() -> None:
    configure_logging()
    settings = get_settings()
    if settings.tmdb.api_token is None:
        logger.warning("tmdb_token_missing", hint="set BOT_TMDB__API_TOKEN")

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(token=settings.telegram_token.get_secret_value(), session=session)
    dp = Dispatcher()
    dp.include_router(setup_routers())
    dp.errors.register(ErrorMonitor(settings=settings))

    context_middleware = ChatContextMiddleware()
    dp.message.middleware(context_middleware)
    dp.edited_message.middleware(context_middleware)

    throttle_middleware = ThrottleMiddleware(settings)
    dp.message.middleware(throttle_middleware)
    dp.edited_message.middleware(throttle_middleware)

    http_client = httpx.AsyncClient(timeout=settings.tmdb.request_timeout_seconds)
    catalog = MovieCatalogService(http_client, settings=settings.tmdb)
    search_sessions = SearchSessionRegistry(
        catalog,
        search_settings=settings.search,
        tmdb_settings=settings.tmdb,
    )
    search_sessions.start_sweeper()

    logger.info(
        "bot_starting",
        environment=settings.environment,
        debounce_seconds=settings.search.debounce_seconds,
    )
    try:
        await dp.start_polling(bot, search_sessions=search_sessions)
    finally:
        await search_sessions.aclose()
        await http_client.aclose()
        await bot.session.close()
        logger.info("bot_stopped")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
