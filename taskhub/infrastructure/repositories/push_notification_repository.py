"""Persistence helpers for the push delivery queue."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from taskhub.domain.entities import PUSH_STATUS_PENDING, PushNotification
from taskhub.infrastructure.models import PushNotificationModel
from taskhub.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


class PushNotificationRepository:
    """Enqueue push requests and record their delivery outcome."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, push: PushNotification, *, commit: bool = True) -> PushNotification:
        model = PushNotificationModel(
            user_id=push.user_id,
            title=push.title,
            body=push.body,
            data=push.data,
            status=push.status,
            attempts=push.attempts,
            error_log=push.error_log,
            created_at=ensure_app_naive_datetime(push.created_at or now_in_app_timezone()),
        )
        self.session.add(model)
        self.session.flush()
        created = self._to_entity(model)
        if commit:
            self.session.commit()
        return created

    def get(self, push_id: int) -> PushNotification | None:
        model = self.session.get(PushNotificationModel, push_id)
        return self._to_entity(model) if model else None

    def list_pending(self, *, limit: int, max_attempts: int) -> Sequence[PushNotification]:
        """Return the oldest PENDING entries that still have attempts left."""

        query = (
            self.session.query(PushNotificationModel)
            .filter(PushNotificationModel.status == PUSH_STATUS_PENDING)
            .filter(PushNotificationModel.attempts < max_attempts)
            .order_by(PushNotificationModel.created_at.asc(), PushNotificationModel.id.asc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def list_recent(self, *, limit: int = 10) -> Sequence[PushNotification]:
        query = (
            self.session.query(PushNotificationModel)
            .order_by(PushNotificationModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def record_attempt(
        self,
        push_id: int,
        *,
        status: str,
        attempts: int,
        error_log: str | None,
    ) -> None:
        self.session.query(PushNotificationModel).filter(
            PushNotificationModel.id == push_id
        ).update(
            {
                PushNotificationModel.status: status,
                PushNotificationModel.attempts: attempts,
                PushNotificationModel.error_log: error_log,
            },
            synchronize_session=False,
        )
        self.session.commit()

    @staticmethod
    def _to_entity(model: PushNotificationModel) -> PushNotification:
        return PushNotification(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            body=model.body,
            data=model.data,
            status=model.status,
            attempts=model.attempts or 0,
            error_log=model.error_log,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["PushNotificationRepository"]
