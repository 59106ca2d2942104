"""Telegram handlers feeding chat input into the search controller."""

from __future__ import annotations

from aiogram import Bot, F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from moviefinder.bot.sessions import SearchSessionRegistry
from moviefinder.bot.utils.telegram import answer_with_retry
from moviefinder.logging import logger

router = Router()

GREETING = (
    "Find Movies You'll Enjoy Without Hassle.\n"
    "Send me a title and I'll search as you type. "
    "Edit your message to refine the search."
)
HELP_TEXT = (
    "Send any text to search movies by title.\n"
    "Edit a sent message to change the search.\n"
    "/clear - go back to the most popular movies\n"
    "/start - post a fresh results message"
)


@router.message(CommandStart())
async def handle_start(message: Message, bot: Bot, search_sessions: SearchSessionRegistry) -> None:
    await answer_with_retry(message, GREETING, parse_mode=None)
    session = search_sessions.session_for(bot, message.chat.id)
    session.reset_message()
    if session.controller.committed_query is None:
        session.controller.flush()
    else:
        session.rerender()


@router.message(Command("help"))
async def handle_help(message: Message) -> None:
    await answer_with_retry(message, HELP_TEXT, parse_mode=None)


@router.message(Command("clear"))
async def handle_clear(message: Message, bot: Bot, search_sessions: SearchSessionRegistry) -> None:
    session = search_sessions.session_for(bot, message.chat.id)
    session.controller.on_input_change("")


@router.message(F.text, ~F.text.startswith("/"))
async def handle_query_text(message: Message, bot: Bot, search_sessions: SearchSessionRegistry) -> None:
    session = search_sessions.session_for(bot, message.chat.id)
    logger.debug("search_input", chat_id=message.chat.id, length=len(message.text))
    session.controller.on_input_change(message.text)


@router.edited_message(F.text, ~F.text.startswith("/"))
async def handle_query_edit(message: Message, bot: Bot, search_sessions: SearchSessionRegistry) -> None:
    session = search_sessions.session_for(bot, message.chat.id)
    logger.debug("search_input_edited", chat_id=message.chat.id, length=len(message.text))
    session.controller.on_input_change(message.text)


__all__ = [
    "handle_clear",
    "handle_help",
    "handle_query_edit",
    "handle_query_text",
    "handle_start",
    "router",
]
