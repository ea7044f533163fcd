"""Domain entity representing a queued push delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

PUSH_STATUS_PENDING = "PENDING"
PUSH_STATUS_SENT = "SENT"
PUSH_STATUS_FAILED = "FAILED"

PUSH_TERMINAL_STATUSES = frozenset({PUSH_STATUS_SENT, PUSH_STATUS_FAILED})


@dataclass
class PushNotification:
    """A single per-user push send request and its delivery state."""

    id: int | None
    user_id: int
    title: str
    body: str
    data: dict[str, Any] | str | None = field(default_factory=dict)
    status: str = PUSH_STATUS_PENDING
    attempts: int = 0
    error_log: str | None = None
    created_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in PUSH_TERMINAL_STATUSES


__all__ = [
    "PushNotification",
    "PUSH_STATUS_PENDING",
    "PUSH_STATUS_SENT",
    "PUSH_STATUS_FAILED",
    "PUSH_TERMINAL_STATUSES",
]
