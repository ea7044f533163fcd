"""Domain entity representing a queued domain event."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class DomainEvent:
    """Fact about a business action waiting to be fanned out to users."""

    id: int | None
    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    processed: bool = False
    attempts: int = 0
    error_log: str | None = None
    created_at: datetime | None = None

    @property
    def actor_id(self) -> int | None:
        """Return the identifier of the user that triggered the event."""

        raw = (self.payload or {}).get("actor_id")
        try:
            return int(raw) if raw is not None else None
        except (TypeError, ValueError):
            return None


__all__ = ["DomainEvent"]
