"""Fixed-interval polling loops for the background dispatchers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class PollingWorker:
    """Fire ``cycle`` immediately and then every ``interval_seconds``.

    Ticks are scheduled on a fixed period whether or not the previous cycle
    finished; the cycle itself decides whether an overlapping tick is a no-op.
    """

    def __init__(
        self,
        name: str,
        cycle: Callable[[], Awaitable[Any]],
        *,
        interval_seconds: float,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self._cycle = cycle
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None
        self._ticks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        logger.info("%s started. Polling every %s seconds.", self.name, self._interval)
        self._task = asyncio.create_task(self._loop(), name=f"{self.name}-loop")

    async def stop(self) -> None:
        tasks = [task for task in (self._task, *self._ticks) if task is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._ticks.clear()
        logger.info("%s stopped.", self.name)

    async def _loop(self) -> None:
        while True:
            tick = asyncio.create_task(self._tick(), name=f"{self.name}-tick")
            self._ticks.add(tick)
            tick.add_done_callback(self._ticks.discard)
            await asyncio.sleep(self._interval)

    async def _tick(self) -> None:
        try:
            await self._cycle()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("%s cycle failed", self.name)


__all__ = ["PollingWorker"]
