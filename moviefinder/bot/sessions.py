"""Per-chat search sessions binding a QueryController to a status message."""

from __future__ import annotations

import asyncio
import time
from typing import Any

from aiogram import Bot

from moviefinder.bot.utils.messages import render_fetch_state
from moviefinder.bot.utils.telegram import bot_send_with_retry, edit_with_retry
from moviefinder.config import SearchSettings, TmdbSettings
from moviefinder.logging import logger
from moviefinder.services.query_controller import MovieSource, QueryController


class SearchSession:
    """Keeps one chat's results message in sync with its controller.

    The first render sends a new message; later renders edit it. Renders are
    coalesced so that only the most recent text is delivered, and text that
    is already on screen is not sent again.
    """

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        controller: QueryController,
        *,
        image_base_url: str,
        max_results: int = 10,
    ) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.controller = controller
        self._image_base_url = image_base_url
        self._max_results = max_results
        self._message_id: int | None = None
        self._shown_text: str | None = None
        self._pending_text: str | None = None
        self._render_task: asyncio.Task[None] | None = None
        self._unsubscribe = controller.subscribe(self._on_change)

    @property
    def message_id(self) -> int | None:
        return self._message_id

    def reset_message(self) -> None:
        """Post the next render as a new message instead of editing."""

        self._message_id = None
        self._shown_text = None

    def rerender(self) -> None:
        self._on_change(self.controller)

    async def wait_rendered(self) -> None:
        while self._render_task is not None and not self._render_task.done():
            await self._render_task

    async def aclose(self) -> None:
        self._unsubscribe()
        await self.controller.aclose()
        if self._render_task is not None and not self._render_task.done():
            self._render_task.cancel()
            await asyncio.gather(self._render_task, return_exceptions=True)

    def _on_change(self, controller: QueryController) -> None:
        text = render_fetch_state(
            controller.state,
            query=controller.committed_query,
            image_base_url=self._image_base_url,
            limit=self._max_results,
        )
        # _flush compares with delivered text, not text still in flight.
        self._pending_text = text
        if self._render_task is None or self._render_task.done():
            self._render_task = asyncio.get_running_loop().create_task(self._flush())

    async def _flush(self) -> None:
        while self._pending_text is not None:
            text = self._pending_text
            self._pending_text = None
            if text == self._shown_text:
                continue
            try:
                await self._deliver(text)
            except Exception:
                logger.exception("search_render_failed", chat_id=self.chat_id)
                continue
            self._shown_text = text

    async def _deliver(self, text: str) -> None:
        if self._message_id is None:
            message = await bot_send_with_retry(
                self.bot,
                chat_id=self.chat_id,
                text=text,
                parse_mode=None,
                disable_web_page_preview=True,
            )
            self._message_id = message.message_id
            return
        await edit_with_retry(
            self.bot,
            chat_id=self.chat_id,
            message_id=self._message_id,
            text=text,
            parse_mode=None,
            disable_web_page_preview=True,
        )


class SearchSessionRegistry:
    """Creates and tracks one SearchSession per chat.

    Sessions untouched for ``search.idle_ttl_seconds`` are closed by
    ``evict_idle``; ``start_sweeper`` runs it every
    ``search.sweep_interval_seconds``. A chat that comes back after eviction
    gets a fresh session and a new results message.
    """

    def __init__(
        self,
        catalog: MovieSource,
        *,
        search_settings: SearchSettings | None = None,
        tmdb_settings: TmdbSettings | None = None,
    ) -> None:
        self._catalog = catalog
        self._search = search_settings or SearchSettings()
        self._tmdb = tmdb_settings or TmdbSettings()
        self._sessions: dict[int, SearchSession] = {}
        self._last_used: dict[int, float] = {}
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, chat_id: int) -> SearchSession | None:
        return self._sessions.get(chat_id)

    def session_for(self, bot: Bot, chat_id: int) -> SearchSession:
        self._last_used[chat_id] = time.monotonic()
        session = self._sessions.get(chat_id)
        if session is not None:
            return session
        controller = QueryController(
            self._catalog,
            debounce_seconds=self._search.debounce_seconds,
        )
        session = SearchSession(
            bot,
            chat_id,
            controller,
            image_base_url=self._tmdb.image_base_url,
            max_results=self._search.max_results,
        )
        self._sessions[chat_id] = session
        logger.info("search_session_created", chat_id=chat_id, sessions=len(self._sessions))
        return session

    async def evict_idle(self, now: float | None = None) -> int:
        """Close sessions idle past the TTL. Sessions mid-fetch are kept."""

        now = time.monotonic() if now is None else now
        ttl = self._search.idle_ttl_seconds
        expired = [
            chat_id
            for chat_id, session in self._sessions.items()
            if now - self._last_used.get(chat_id, now) >= ttl and not session.controller.is_loading
        ]
        for chat_id in expired:
            session = self._sessions.pop(chat_id)
            self._last_used.pop(chat_id, None)
            try:
                await session.aclose()
            except Exception as exc:
                logger.warning("search_session_close_failed", chat_id=chat_id, error=str(exc))
        if expired:
            logger.info("search_sessions_evicted", evicted=len(expired), sessions=len(self._sessions))
        return len(expired)

    def start_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._search.sweep_interval_seconds)
            await self.evict_idle()

    async def aclose(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            await asyncio.gather(self._sweeper, return_exceptions=True)
            self._sweeper = None
        sessions = list(self._sessions.values())
        self._sessions.clear()
        self._last_used.clear()
        results: list[Any] = await asyncio.gather(
            *(session.aclose() for session in sessions),
            return_exceptions=True,
        )
        for session, result in zip(sessions, results):
            if isinstance(result, Exception):
                logger.warning("search_session_close_failed", chat_id=session.chat_id, error=str(result))


__all__ = ["SearchSession", "SearchSessionRegistry"]
