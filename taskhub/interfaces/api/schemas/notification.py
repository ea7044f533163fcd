"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: str
    title: str
    message: str
    entity_type: str | None = None
    entity_id: int | None = None
    is_read: bool
    created_at: datetime


class UnreadCountRead(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int


class NotificationPreferenceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_type: str
    in_app: bool
    push: bool


class NotificationPreferenceUpdate(BaseModel):
    """Channel flags for one event type."""

    model_config = ConfigDict(extra="forbid")

    event_type: str = Field(..., min_length=1, max_length=50)
    in_app: bool = True
    push: bool = True


__all__ = [
    "NotificationRead",
    "UnreadCountRead",
    "MarkAllReadResponse",
    "NotificationPreferenceRead",
    "NotificationPreferenceUpdate",
]
