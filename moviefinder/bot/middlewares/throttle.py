"""Per-user flood guard in front of the search handlers."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable, Deque, Dict

from aiogram import BaseMiddleware
from aiogram.types import Message, TelegramObject

from moviefinder.config import BotSettings, get_settings
from moviefinder.logging import logger

LIMIT_TEXT = "You're typing faster than I can search. Please slow down."


class ThrottleMiddleware(BaseMiddleware):
    """Drop messages from users exceeding ``max_requests`` per window.

    The user is told once per window; further dropped events stay silent.
    """

    def __init__(self, settings: BotSettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.window_seconds = self.settings.request_limit.interval_seconds
        self.max_requests = self.settings.request_limit.max_requests
        self._events: Dict[int, Deque[float]] = defaultdict(deque)
        self._notified_at: Dict[int, float] = {}

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        if self.max_requests <= 0:
            return await handler(event, data)

        user_id = self._extract_user_id(event)
        if user_id is None:
            return await handler(event, data)

        now = time.monotonic()
        bucket = self._events[user_id]
        while bucket and now - bucket[0] > self.window_seconds:
            bucket.popleft()

        if len(bucket) >= self.max_requests:
            logger.info("throttled_user", user_id=user_id, window_seconds=self.window_seconds)
            await self._notify_limit(event, user_id, now)
            return None

        bucket.append(now)
        return await handler(event, data)

    @staticmethod
    def _extract_user_id(event: TelegramObject) -> int | None:
        if isinstance(event, Message) and event.from_user is not None:
            return event.from_user.id
        return None

    async def _notify_limit(self, event: TelegramObject, user_id: int, now: float) -> None:
        last = self._notified_at.get(user_id)
        if last is not None and now - last <= self.window_seconds:
            return
        self._notified_at[user_id] = now
        if isinstance(event, Message):
            await event.answer(LIMIT_TEXT, parse_mode=None)


__all__ = ["ThrottleMiddleware"]
