"""Bind chat and user ids to structlog's context for each update."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

import structlog
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject


class ChatContextMiddleware(BaseMiddleware):
    """Every log line emitted while handling an update carries its chat.

    Debounce timers and fetch tasks started by the handler copy the context
    when they are scheduled, so their log lines are tagged as well.
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        context: Dict[str, Any] = {}
        chat = getattr(event, "chat", None)
        if chat is not None:
            context["chat_id"] = chat.id
        from_user = getattr(event, "from_user", None)
        if from_user is not None:
            context["user_id"] = from_user.id
        if not context:
            return await handler(event, data)
        with structlog.contextvars.bound_contextvars(**context):
            return await handler(event, data)


__all__ = ["ChatContextMiddleware"]
