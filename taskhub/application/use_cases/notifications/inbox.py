"""Use cases backing the notification inbox."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from taskhub.domain.entities import Notification
from taskhub.infrastructure.repositories import NotificationRepository

DEFAULT_INBOX_LIMIT = 50


def get_user_notifications(
    session: Session, user_id: int, *, limit: int = DEFAULT_INBOX_LIMIT
) -> Sequence[Notification]:
    """Return the newest non-deleted notifications of ``user_id``."""

    return NotificationRepository(session).list_for_user(user_id, limit=limit)


def count_unread_notifications(session: Session, user_id: int) -> int:
    return NotificationRepository(session).count_unread(user_id)


def mark_as_read(session: Session, notification_id: int, user_id: int) -> Notification:
    """Mark a notification as read, provided it belongs to ``user_id``."""

    notification = NotificationRepository(session).mark_as_read(
        notification_id, user_id=user_id
    )
    if notification is None:
        raise ValueError("Notification not found")
    return notification


def mark_all_as_read(session: Session, user_id: int) -> int:
    """Mark every unread notification of ``user_id`` as read."""

    return NotificationRepository(session).mark_all_as_read(user_id)


def delete_notification(session: Session, notification_id: int, user_id: int) -> None:
    if not NotificationRepository(session).soft_delete(notification_id, user_id=user_id):
        raise ValueError("Notification not found")


__all__ = [
    "DEFAULT_INBOX_LIMIT",
    "get_user_notifications",
    "count_unread_notifications",
    "mark_as_read",
    "mark_all_as_read",
    "delete_notification",
]
