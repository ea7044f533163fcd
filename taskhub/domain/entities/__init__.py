"""Domain entities exposed by the application."""

from .domain_event import DomainEvent
from .notification import Notification
from .notification_preference import NotificationPreference
from .push_notification import (
    PUSH_STATUS_FAILED,
    PUSH_STATUS_PENDING,
    PUSH_STATUS_SENT,
    PUSH_TERMINAL_STATUSES,
    PushNotification,
)
from .user import (
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
    ROLE_SR_DEVELOPER,
    ROLE_SUPER_ADMIN,
    ROLE_TEAM_LEAD,
    ROLES,
    User,
)

__all__ = [
    "DomainEvent",
    "Notification",
    "NotificationPreference",
    "PushNotification",
    "PUSH_STATUS_PENDING",
    "PUSH_STATUS_SENT",
    "PUSH_STATUS_FAILED",
    "PUSH_TERMINAL_STATUSES",
    "User",
    "ROLES",
    "ROLE_SUPER_ADMIN",
    "ROLE_ADMIN",
    "ROLE_TEAM_LEAD",
    "ROLE_SR_DEVELOPER",
    "ROLE_EMPLOYEE",
]
