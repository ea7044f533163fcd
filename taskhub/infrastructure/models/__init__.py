"""ORM models used by the application infrastructure."""

from .domain_event import DomainEventModel
from .notification import NotificationModel
from .notification_preference import NotificationPreferenceModel
from .push_notification import PushNotificationModel
from .user import UserModel

__all__ = [
    "DomainEventModel",
    "NotificationModel",
    "NotificationPreferenceModel",
    "PushNotificationModel",
    "UserModel",
]
