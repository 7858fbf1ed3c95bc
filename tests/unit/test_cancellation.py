import asyncio

import pytest

from proxyview.util.cancellation import RequestSlot

pytestmark = pytest.mark.unit


def test_starting_a_request_cancels_the_previous_one():
    slot = RequestSlot()
    owners = []

    async def job(name, gate):
        await gate.wait()
        owners.append((name, slot.is_current()))

    async def scenario():
        gate = asyncio.Event()
        first = slot.start(job("first", gate))
        second = slot.start(job("second", gate))
        assert slot.task is second
        gate.set()
        await asyncio.wait({first, second})
        return first, second

    first, second = asyncio.run(scenario())
    assert first.cancelled()
    assert not second.cancelled()
    assert owners == [("second", True)]
    assert not slot.active


def test_cancel_reports_whether_work_was_running():
    slot = RequestSlot()

    async def scenario():
        assert slot.cancel() is False
        task = slot.start(asyncio.sleep(10))
        assert slot.active
        assert slot.cancel() is True
        await asyncio.wait({task})
        assert task.cancelled()
        assert slot.task is None
        assert not slot.is_current(task)

    asyncio.run(scenario())
