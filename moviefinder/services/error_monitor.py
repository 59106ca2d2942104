"""Report unhandled handler errors to the log and the admin chat."""

from __future__ import annotations

import traceback

from aiogram import Bot
from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import ErrorEvent, Update

from moviefinder.bot.utils.messages import truncate
from moviefinder.bot.utils.telegram import bot_send_with_retry
from moviefinder.config import BotSettings
from moviefinder.logging import logger

TRACEBACK_CHAR_LIMIT = 1800
_UPDATE_FIELDS = ("message", "edited_message", "callback_query")


class ErrorMonitor:
    """Async callable registered on the dispatcher's error observer."""

    def __init__(self, settings: BotSettings) -> None:
        self._settings = settings

    async def __call__(self, event: ErrorEvent, bot: Bot):
        return await self.handle_error(event, bot)

    async def handle_error(self, event: ErrorEvent, bot: Bot):
        update_id = getattr(event.update, "update_id", None)
        logger.error(
            "bot_error_captured",
            exception_type=event.exception.__class__.__name__,
            exception=str(event.exception),
            update_id=update_id,
        )

        admin_id = self._settings.admin_telegram_id
        if admin_id is None:
            return UNHANDLED

        try:
            await bot_send_with_retry(
                bot,
                chat_id=admin_id,
                text=self.build_report(event),
                parse_mode=None,
            )
        except Exception:
            logger.exception("error_monitor_notification_failed", update_id=update_id)
        return UNHANDLED

    def build_report(self, event: ErrorEvent) -> str:
        exception = event.exception
        update = event.update
        update_type, chat_id, user_id = self._describe(update)
        lines = [
            "MOVIE FINDER ERROR",
            f"Environment: {self._settings.environment}",
            f"Exception: {exception.__class__.__name__}: {exception}",
            f"Update ID: {getattr(update, 'update_id', 'unknown')}",
            f"Update Type: {update_type}",
            f"Chat: {chat_id}",
            f"User: {user_id}",
        ]
        trace = "".join(
            traceback.format_exception(exception.__class__, exception, exception.__traceback__)
        ).strip()
        if trace:
            lines.extend(["", "Traceback:", truncate(trace, TRACEBACK_CHAR_LIMIT)])
        return truncate("\n".join(lines))

    @staticmethod
    def _describe(update: Update | None) -> tuple[str, str, str]:
        if update is None:
            return "unknown", "unknown", "unknown"
        for field in _UPDATE_FIELDS:
            source = getattr(update, field, None)
            if source is None:
                continue
            chat = getattr(source, "chat", None) or getattr(getattr(source, "message", None), "chat", None)
            user = getattr(source, "from_user", None)
            chat_id = str(chat.id) if chat is not None else "unknown"
            user_id = str(user.id) if user is not None else "unknown"
            return field, chat_id, user_id
        return "unknown", "unknown", "unknown"


__all__ = ["ErrorMonitor"]
