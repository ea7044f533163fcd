"""Persistence helpers for the domain event queue."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from taskhub.domain.entities import DomainEvent
from taskhub.infrastructure.models import DomainEventModel
from taskhub.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


class DomainEventRepository:
    """Append events and track their processing state."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, event: DomainEvent, *, commit: bool = True) -> DomainEvent:
        model = DomainEventModel(
            event_type=event.event_type,
            payload=event.payload or {},
            processed=event.processed,
            attempts=event.attempts,
            error_log=event.error_log,
            created_at=ensure_app_naive_datetime(event.created_at or now_in_app_timezone()),
        )
        self.session.add(model)
        self.session.flush()
        created = self._to_entity(model)
        if commit:
            self.session.commit()
        return created

    def get(self, event_id: int) -> DomainEvent | None:
        model = self.session.get(DomainEventModel, event_id)
        return self._to_entity(model) if model else None

    def list_pending(self, *, limit: int) -> Sequence[DomainEvent]:
        """Return the oldest unprocessed events, at most ``limit`` of them."""

        query = (
            self.session.query(DomainEventModel)
            .filter(DomainEventModel.processed.is_(False))
            .order_by(DomainEventModel.created_at.asc(), DomainEventModel.id.asc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def list_recent(self, *, limit: int = 10) -> Sequence[DomainEvent]:
        query = (
            self.session.query(DomainEventModel)
            .order_by(DomainEventModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def mark_processed(self, event_id: int, *, commit: bool = True) -> None:
        self.session.query(DomainEventModel).filter(
            DomainEventModel.id == event_id
        ).update({DomainEventModel.processed: True}, synchronize_session=False)
        if commit:
            self.session.commit()

    def record_failure(
        self, event_id: int, error: str, *, max_attempts: int
    ) -> DomainEvent | None:
        """Count a failed fan-out attempt and retire the event past ``max_attempts``."""

        model = self.session.get(DomainEventModel, event_id)
        if model is None:
            return None
        model.attempts = (model.attempts or 0) + 1
        model.error_log = error
        if model.attempts >= max_attempts:
            model.processed = True
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: DomainEventModel) -> DomainEvent:
        return DomainEvent(
            id=model.id,
            event_type=model.event_type,
            payload=model.payload or {},
            processed=model.processed,
            attempts=model.attempts or 0,
            error_log=model.error_log,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["DomainEventRepository"]
