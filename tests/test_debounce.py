from __future__ import annotations

import asyncio

import pytest

from moviefinder.utils.debounce import Debouncer


@pytest.mark.asyncio
async def test_debouncer_coalesces_rapid_triggers():
    fired: list[float] = []
    debouncer = Debouncer(0.05, lambda: fired.append(asyncio.get_running_loop().time()))

    for _ in range(3):
        debouncer.trigger()
        await asyncio.sleep(0.01)
    assert debouncer.pending

    await asyncio.sleep(0.1)
    assert len(fired) == 1
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_cancel_prevents_callback():
    fired: list[int] = []
    debouncer = Debouncer(0.02, lambda: fired.append(1))

    debouncer.trigger()
    debouncer.cancel()
    await asyncio.sleep(0.05)

    assert fired == []
    assert not debouncer.pending
