"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

from sqlalchemy.orm import Session

from taskhub.domain.entities import Notification
from taskhub.infrastructure.models import NotificationModel
from taskhub.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide inbox operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: int,
        *,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_deleted.is_(False))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread(self, user_id: int) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .filter(NotificationModel.is_deleted.is_(False))
            .count()
        )

    def bulk_create(
        self, notifications: Iterable[Notification], *, commit: bool = True
    ) -> list[Notification]:
        """Insert ``notifications`` and return them with their identifiers."""

        models = []
        for notification in notifications:
            model = NotificationModel()
            self._apply_entity_to_model(model, notification)
            models.append(model)
        if not models:
            return []

        self.session.add_all(models)
        self.session.flush()
        created = [self._to_entity(model) for model in models]
        if commit:
            self.session.commit()
        return created

    def mark_as_read(self, notification_id: int, *, user_id: int) -> Notification | None:
        """Flag a notification owned by ``user_id`` as read.

        Returns ``None`` when the notification does not exist or belongs to
        another user.
        """

        model = self.session.get(NotificationModel, notification_id)
        if model is None or model.user_id != user_id or model.is_deleted:
            return None
        model.is_read = True
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_as_read(self, user_id: int) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
                NotificationModel.is_deleted.is_(False),
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def soft_delete(self, notification_id: int, *, user_id: int) -> bool:
        model = self.session.get(NotificationModel, notification_id)
        if model is None or model.user_id != user_id or model.is_deleted:
            return False
        model.is_deleted = True
        self.session.add(model)
        self.session.commit()
        return True

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.user_id = notification.user_id
        model.type = notification.type
        model.title = notification.title
        model.message = notification.message
        model.entity_type = notification.entity_type
        model.entity_id = notification.entity_id
        model.is_read = notification.is_read
        model.is_deleted = notification.is_deleted

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            title=model.title,
            message=model.message,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            is_read=model.is_read,
            is_deleted=model.is_deleted,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
