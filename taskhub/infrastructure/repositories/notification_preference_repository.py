"""Persistence helpers for notification preferences."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from taskhub.domain.entities import NotificationPreference
from taskhub.infrastructure.models import NotificationPreferenceModel


class NotificationPreferenceRepository:
    """Read and upsert per-event channel preferences."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_map(
        self, user_ids: Iterable[int], *, event_type: str
    ) -> dict[int, NotificationPreference]:
        """Return the stored preferences of ``user_ids`` for ``event_type``.

        Users without a stored row are absent from the result.
        """

        unique_ids = {int(user_id) for user_id in user_ids}
        if not unique_ids:
            return {}
        query = (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id.in_(unique_ids))
            .filter(NotificationPreferenceModel.event_type == event_type)
        )
        return {model.user_id: self._to_entity(model) for model in query.all()}

    def list_for_user(self, user_id: int) -> Sequence[NotificationPreference]:
        query = (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id == user_id)
            .order_by(NotificationPreferenceModel.event_type)
        )
        return [self._to_entity(model) for model in query.all()]

    def upsert(self, preference: NotificationPreference) -> NotificationPreference:
        model = self.session.get(
            NotificationPreferenceModel, (preference.user_id, preference.event_type)
        )
        if model is None:
            model = NotificationPreferenceModel(
                user_id=preference.user_id, event_type=preference.event_type
            )
        model.in_app = preference.in_app
        model.push = preference.push
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        return NotificationPreference(
            user_id=model.user_id,
            event_type=model.event_type,
            in_app=model.in_app,
            push=model.push,
        )


__all__ = ["NotificationPreferenceRepository"]
