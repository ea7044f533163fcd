"""Use cases for reading and changing notification preferences."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from taskhub.domain.entities import NotificationPreference
from taskhub.infrastructure.repositories import NotificationPreferenceRepository


def list_preferences(session: Session, user_id: int) -> Sequence[NotificationPreference]:
    """Return the preference rows stored for ``user_id``.

    Event types without a row are delivered on every channel.
    """

    return NotificationPreferenceRepository(session).list_for_user(user_id)


def update_preference(
    session: Session,
    user_id: int,
    *,
    event_type: str,
    in_app: bool,
    push: bool = True,
) -> NotificationPreference:
    """Create or replace the preference of ``user_id`` for ``event_type``."""

    event_type = (event_type or "").strip().upper()
    if not event_type:
        raise ValueError("The event type is required")

    preference = NotificationPreference(
        user_id=user_id, event_type=event_type, in_app=in_app, push=push
    )
    return NotificationPreferenceRepository(session).upsert(preference)


__all__ = ["list_preferences", "update_preference"]
