"""Cancel-and-reschedule delayed callbacks on the asyncio loop."""

from __future__ import annotations

import asyncio
from typing import Callable


class Debouncer:
    """Run ``callback`` once input has been quiet for ``delay`` seconds.

    Every ``trigger()`` cancels the pending call and schedules a fresh one,
    so at most one call is pending and a cancelled call never runs.
    """

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


__all__ = ["Debouncer"]
