"""Domain entity describing a user's opt-out flags for one event type."""

from dataclasses import dataclass


@dataclass
class NotificationPreference:
    """Delivery channels enabled for ``user_id`` on ``event_type``.

    A missing preference row means every channel is enabled.
    """

    user_id: int
    event_type: str
    in_app: bool = True
    push: bool = True


__all__ = ["NotificationPreference"]
