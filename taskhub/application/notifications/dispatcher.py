"""Fan queued domain events out into per-user notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

import anyio
from sqlalchemy.orm import Session

from taskhub.config import Settings, get_settings
from taskhub.domain.entities import DomainEvent, Notification, NotificationPreference, PushNotification
from taskhub.infrastructure.database import SessionLocal
from taskhub.infrastructure.repositories import (
    DomainEventRepository,
    NotificationPreferenceRepository,
    NotificationRepository,
    PushNotificationRepository,
)
from taskhub.utils import now_in_app_timezone

from .guard import CycleGuard
from .roles import DatabasePrivilegedUsersProvider, PrivilegedUsersProvider, RoleSets
from .routing import ROUTING_TABLE, RoutingRule, resolve_recipients, select_recipients

logger = logging.getLogger(__name__)

RoleProviderFactory = Callable[[Session], PrivilegedUsersProvider]


class NotificationDispatcher:
    """Poll the event queue and write the resulting inbox notifications.

    Each event is handled in its own transaction: the notification rows, the
    optional push queue entries and the ``processed`` flag are committed
    together. A failure aborts the cycle and leaves the remaining events for
    the next one; an event that keeps failing is retired after
    ``max_event_attempts`` with its last error kept in ``error_log``.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        *,
        settings: Settings | None = None,
        role_provider_factory: RoleProviderFactory = DatabasePrivilegedUsersProvider,
        routing_table: Mapping[str, RoutingRule] = ROUTING_TABLE,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._role_provider_factory = role_provider_factory
        self._routing_table = routing_table
        self._guard = CycleGuard()

    @property
    def is_processing(self) -> bool:
        return self._guard.held

    async def run_cycle(self) -> bool:
        """Run one polling cycle in a worker thread.

        Returns ``False`` without doing anything when a cycle is already in
        progress.
        """

        with self._guard.acquire() as acquired:
            if not acquired:
                return False
            await anyio.to_thread.run_sync(self._process_batch)
        return True

    def run_cycle_sync(self) -> bool:
        """Blocking counterpart of :meth:`run_cycle` for scripts and tests."""

        with self._guard.acquire() as acquired:
            if not acquired:
                return False
            self._process_batch()
        return True

    def _process_batch(self) -> int:
        session = self._session_factory()
        try:
            return self._drain(session)
        except Exception:
            session.rollback()
            logger.exception("Error processing notification queue")
            return 0
        finally:
            session.close()

    def _drain(self, session: Session) -> int:
        repository = DomainEventRepository(session)
        pending = repository.list_pending(limit=self._settings.event_batch_size)
        if not pending:
            return 0

        logger.info("Processing %s notification events...", len(pending))
        role_sets = self._role_provider_factory(session).load_role_sets()

        for event in pending:
            try:
                self.dispatch_event(session, event, role_sets)
            except Exception as exc:
                session.rollback()
                self._record_failure(session, event, exc)
                raise
        return len(pending)

    def dispatch_event(
        self, session: Session, event: DomainEvent, role_sets: RoleSets
    ) -> list[Notification]:
        """Create the notifications for ``event`` and mark it processed."""

        directives = resolve_recipients(
            event.event_type,
            event.payload,
            role_sets,
            routing_table=self._routing_table,
        )
        recipients = select_recipients(directives, actor_id=event.actor_id)

        created: list[Notification] = []
        if recipients:
            preferences = NotificationPreferenceRepository(session).get_map(
                [directive.user_id for directive in recipients],
                event_type=event.event_type,
            )
            created_at = now_in_app_timezone()
            notifications = [
                Notification(
                    id=None,
                    user_id=directive.user_id,
                    type=directive.type,
                    title=directive.title,
                    message=directive.message,
                    entity_type=directive.entity_type,
                    entity_id=directive.entity_id,
                    created_at=created_at,
                )
                for directive in recipients
                if _allows(preferences.get(directive.user_id), "in_app")
            ]
            created = NotificationRepository(session).bulk_create(notifications, commit=False)
            if created and self._settings.push_on_notification:
                self._enqueue_pushes(session, created, preferences)

        DomainEventRepository(session).mark_processed(event.id, commit=False)
        session.commit()
        return created

    @staticmethod
    def _enqueue_pushes(
        session: Session,
        notifications: list[Notification],
        preferences: Mapping[int, NotificationPreference],
    ) -> None:
        repository = PushNotificationRepository(session)
        for notification in notifications:
            if not _allows(preferences.get(notification.user_id), "push"):
                continue
            data = {
                "type": notification.type,
                "notification_id": notification.id,
                "entity_type": notification.entity_type,
                "entity_id": notification.entity_id,
            }
            repository.create(
                PushNotification(
                    id=None,
                    user_id=notification.user_id,
                    title=notification.title,
                    body=notification.message,
                    data={key: value for key, value in data.items() if value is not None},
                    created_at=notification.created_at,
                ),
                commit=False,
            )

    def _record_failure(self, session: Session, event: DomainEvent, exc: Exception) -> None:
        try:
            updated = DomainEventRepository(session).record_failure(
                event.id,
                f"{type(exc).__name__}: {exc}",
                max_attempts=self._settings.max_event_attempts,
            )
        except Exception:
            session.rollback()
            logger.exception("Could not record the failure of event %s", event.id)
            return

        if updated is not None and updated.processed:
            logger.error(
                "Retiring event %s (%s) after %s failed attempts",
                event.id,
                event.event_type,
                updated.attempts,
            )


def _allows(preference: NotificationPreference | None, channel: str) -> bool:
    return preference is None or bool(getattr(preference, channel))


__all__ = ["NotificationDispatcher"]
