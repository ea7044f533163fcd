"""Public helpers for producing and consuming notifications."""

from .devices import register_device_token, unregister_device_token
from .events import enqueue_push, queue_event
from .inbox import (
    DEFAULT_INBOX_LIMIT,
    count_unread_notifications,
    delete_notification,
    get_user_notifications,
    mark_all_as_read,
    mark_as_read,
)
from .preferences import list_preferences, update_preference

__all__ = [
    "queue_event",
    "enqueue_push",
    "DEFAULT_INBOX_LIMIT",
    "get_user_notifications",
    "count_unread_notifications",
    "mark_as_read",
    "mark_all_as_read",
    "delete_notification",
    "list_preferences",
    "update_preference",
    "register_device_token",
    "unregister_device_token",
]
