"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Notification:
    """Inbox message delivered to a specific user."""

    id: int | None
    user_id: int
    type: str
    title: str
    message: str
    entity_type: str | None = None
    entity_id: int | None = None
    is_read: bool = False
    is_deleted: bool = False
    created_at: datetime | None = None


__all__ = ["Notification"]
