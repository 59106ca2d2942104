"""Tests for logging configuration and async main bootstrap."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
import structlog
from pydantic import SecretStr

from moviefinder import main as main_module
from moviefinder.bot.sessions import SearchSessionRegistry
from moviefinder.config import RequestLimitSettings, SearchSettings, TmdbSettings
from moviefinder.logging import configure_logging


def test_configure_logging_outputs_json(capsys):
    configure_logging()
    logger = structlog.get_logger()
    logger.info("unit-test", query="alien")
    out = capsys.readouterr().out
    assert "unit-test" in out
    assert "alien" in out


class DummyDispatcher:
    def __init__(self) -> None:
        self.included = []
        self.message_middlewares = []
        self.edited_middlewares = []
        self.registered_error_handlers = []
        self.message = SimpleNamespace(middleware=self.message_middlewares.append)
        self.edited_message = SimpleNamespace(middleware=self.edited_middlewares.append)
        self.errors = SimpleNamespace(register=self.registered_error_handlers.append)
        self.started = False

    def include_router(self, router):
        self.included.append(router)

    async def start_polling(self, bot, **kwargs):
        self.started = True
        self.bot = bot
        self.start_kwargs = kwargs


class DummyHttpClient:
    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


class DummyBotSession:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_main_bootstrap(monkeypatch):
    settings = SimpleNamespace(
        telegram_proxy=None,
        telegram_token=SecretStr("token"),
        environment="test",
        admin_telegram_id=None,
        tmdb=TmdbSettings(api_token=SecretStr("tmdb")),
        search=SearchSettings(debounce_seconds=0.5),
        request_limit=RequestLimitSettings(max_requests=5, interval_seconds=1),
    )
    dispatcher = DummyDispatcher()
    bot_session = DummyBotSession()
    http_clients: list[DummyHttpClient] = []
    bot_kwargs = {}

    def fake_bot(**kwargs):
        bot_kwargs.update(kwargs)
        return SimpleNamespace(session=bot_session)

    def fake_client(**kwargs):
        client = DummyHttpClient(**kwargs)
        http_clients.append(client)
        return client

    monkeypatch.setattr(main_module, "configure_logging", lambda: None)
    monkeypatch.setattr(main_module, "get_settings", lambda: settings)
    monkeypatch.setattr(main_module, "Bot", fake_bot)
    monkeypatch.setattr(main_module, "Dispatcher", lambda: dispatcher)
    monkeypatch.setattr(main_module, "setup_routers", lambda: "router")
    monkeypatch.setattr(main_module, "ChatContextMiddleware", lambda: "context")
    monkeypatch.setattr(main_module, "ThrottleMiddleware", lambda s: ("throttle", s))
    monitor = object()
    monkeypatch.setattr(main_module, "ErrorMonitor", lambda settings: monitor)
    monkeypatch.setattr(main_module.httpx, "AsyncClient", fake_client)

    await main_module.main()

    assert bot_kwargs["token"] == "token"
    assert dispatcher.started is True
    assert dispatcher.included == ["router"]
    assert dispatcher.registered_error_handlers == [monitor]
    assert dispatcher.message_middlewares == ["context", ("throttle", settings)]
    assert dispatcher.edited_middlewares == ["context", ("throttle", settings)]
    registry = dispatcher.start_kwargs["search_sessions"]
    assert isinstance(registry, SearchSessionRegistry)
    assert http_clients[0].kwargs == {"timeout": 10}
    assert http_clients[0].closed is True
    assert bot_session.closed is True
