"""Per-instance guard that keeps polling cycles from overlapping."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class CycleGuard:
    """Non-blocking lock owned by a single dispatcher instance.

    Only protects one process. Several worker processes polling the same
    tables need a database-level claim instead.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def held(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def acquire(self) -> Iterator[bool]:
        """Yield ``True`` when the guard was taken, ``False`` if already held."""

        acquired = self._lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()


__all__ = ["CycleGuard"]
