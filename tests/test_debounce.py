import asyncio

import pytest

from diagram_studio.utils.debounce import Debouncer


@pytest.mark.asyncio
async def test_only_last_schedule_fires():
    fired = []

    async def action(value):
        fired.append(value)

    debouncer = Debouncer(0.05, action)
    for value in range(5):
        debouncer.schedule(value)
        await asyncio.sleep(0.002)
    assert debouncer.pending
    await asyncio.sleep(0.15)
    await debouncer.drain()

    assert fired == [4]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_cancel_drops_pending_action():
    fired = []

    async def action():
        fired.append(True)

    debouncer = Debouncer(0.01, action)
    debouncer.schedule()
    debouncer.cancel()
    await asyncio.sleep(0.03)
    assert fired == []


@pytest.mark.asyncio
async def test_reschedule_does_not_interrupt_running_action():
    finished = []

    async def action(value):
        await asyncio.sleep(0.03)
        finished.append(value)

    debouncer = Debouncer(0.005, action)
    debouncer.schedule("first")
    await asyncio.sleep(0.015)
    debouncer.schedule("second")
    await asyncio.sleep(0.02)
    await debouncer.drain()

    assert finished == ["first", "second"]
