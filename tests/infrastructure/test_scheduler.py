"""Tests for the fixed-interval polling worker."""

from __future__ import annotations

import anyio
import pytest

from taskhub.infrastructure.scheduler import PollingWorker


@pytest.mark.anyio
async def test_worker_ticks_immediately_and_repeatedly():
    calls = 0

    async def cycle():
        nonlocal calls
        calls += 1

    worker = PollingWorker("test worker", cycle, interval_seconds=0.01)
    worker.start()
    assert worker.running is True

    with anyio.fail_after(2):
        while calls < 3:
            await anyio.sleep(0.005)

    await worker.stop()
    assert worker.running is False


@pytest.mark.anyio
async def test_failing_cycle_does_not_stop_the_worker():
    calls = 0

    async def cycle():
        nonlocal calls
        calls += 1
        raise RuntimeError("cycle failed")

    worker = PollingWorker("failing worker", cycle, interval_seconds=0.01)
    worker.start()

    with anyio.fail_after(2):
        while calls < 2:
            await anyio.sleep(0.005)

    await worker.stop()


def test_interval_must_be_positive():
    async def cycle():
        return None

    with pytest.raises(ValueError):
        PollingWorker("bad", cycle, interval_seconds=0)
