"""Producer-side helpers that enqueue events and push requests."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from taskhub.domain.entities import DomainEvent, PushNotification
from taskhub.infrastructure.repositories import DomainEventRepository, PushNotificationRepository
from taskhub.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def queue_event(
    session: Session, event_type: str, payload: Mapping[str, Any] | None = None
) -> DomainEvent | None:
    """Add a domain event to the caller's transaction.

    The event is written inside a savepoint and becomes visible to the
    dispatcher when the caller commits. Never raises: a failure to enqueue
    rolls back the savepoint only and is logged, leaving the caller's
    pending work intact.
    """

    event = DomainEvent(
        id=None,
        event_type=event_type,
        payload=dict(payload or {}),
        created_at=now_in_app_timezone(),
    )
    try:
        with session.begin_nested():
            queued = DomainEventRepository(session).create(event, commit=False)
    except Exception:
        logger.exception("Failed to queue notification event %s", event_type)
        return None
    return queued


def enqueue_push(
    session: Session,
    *,
    user_id: int,
    title: str,
    body: str,
    data: Mapping[str, Any] | None = None,
) -> PushNotification:
    """Request an asynchronous push delivery to every device of ``user_id``."""

    if not title or not body:
        raise ValueError("Push notifications require a title and a body")

    push = PushNotification(
        id=None,
        user_id=user_id,
        title=title,
        body=body,
        data=dict(data or {}),
        created_at=now_in_app_timezone(),
    )
    return PushNotificationRepository(session).create(push)


__all__ = ["queue_event", "enqueue_push"]
