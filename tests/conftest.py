"""Shared fakes for controller, session and router tests."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import pytest

# Scaled-down stand-ins for the 1s debounce used in production.
DEBOUNCE = 0.05
SETTLE = 0.15


class GatedCatalog:
    """Catalog double recording queries; held queries block until released."""

    def __init__(self, outcomes: dict[str, Any] | None = None) -> None:
        self.calls: list[str] = []
        self.outcomes = outcomes or {}
        self._gates: dict[str, asyncio.Event] = {}

    def hold(self, query: str) -> None:
        self._gates.setdefault(query, asyncio.Event())

    def release(self, query: str) -> None:
        self._gates.setdefault(query, asyncio.Event()).set()

    async def fetch_movies(self, query: str = "") -> list[dict]:
        self.calls.append(query)
        gate = self._gates.get(query)
        if gate is not None:
            await gate.wait()
        outcome = self.outcomes.get(query, [])
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class DummyBot:
    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.edits: list[dict[str, Any]] = []
        self._next_id = 100

    async def send_message(self, chat_id, text, **kwargs):
        self._next_id += 1
        self.sent.append({"chat_id": chat_id, "text": text, "message_id": self._next_id, **kwargs})
        return SimpleNamespace(message_id=self._next_id, chat=SimpleNamespace(id=chat_id))

    async def edit_message_text(self, text, chat_id, message_id, **kwargs):
        self.edits.append({"chat_id": chat_id, "message_id": message_id, "text": text, **kwargs})
        return True

    @property
    def last_text(self) -> str | None:
        if self.edits:
            return self.edits[-1]["text"]
        if self.sent:
            return self.sent[-1]["text"]
        return None


class DummyMessage:
    def __init__(self, text: str | None, chat_id: int = 42, user_id: int = 7) -> None:
        self.text = text
        self.chat = SimpleNamespace(id=chat_id, type="private")
        self.from_user = SimpleNamespace(id=user_id, full_name="Test User")
        self.answers: list[tuple[str, str | None]] = []

    async def answer(self, text: str, parse_mode: str | None = None):
        self.answers.append((text, parse_mode))
        return text


@pytest.fixture
def catalog() -> GatedCatalog:
    return GatedCatalog()


@pytest.fixture
def bot() -> DummyBot:
    return DummyBot()
