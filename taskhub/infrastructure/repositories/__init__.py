"""Repository implementations for infrastructure layer."""

from .domain_event_repository import DomainEventRepository
from .notification_preference_repository import NotificationPreferenceRepository
from .notification_repository import NotificationRepository
from .push_notification_repository import PushNotificationRepository
from .user_repository import UserRepository, parse_fcm_tokens

__all__ = [
    "DomainEventRepository",
    "NotificationPreferenceRepository",
    "NotificationRepository",
    "PushNotificationRepository",
    "UserRepository",
    "parse_fcm_tokens",
]
