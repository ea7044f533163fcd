from .device import DeviceTokenRequest, DeviceTokensRead
from .notification import (
    MarkAllReadResponse,
    NotificationPreferenceRead,
    NotificationPreferenceUpdate,
    NotificationRead,
    UnreadCountRead,
)

__all__ = [
    "DeviceTokenRequest",
    "DeviceTokensRead",
    "MarkAllReadResponse",
    "NotificationPreferenceRead",
    "NotificationPreferenceUpdate",
    "NotificationRead",
    "UnreadCountRead",
]
