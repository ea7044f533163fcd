"""Deliver queued push notifications with a bounded number of attempts."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any, Protocol

import anyio
from sqlalchemy.orm import Session

from taskhub.config import Settings, get_settings
from taskhub.domain.entities import (
    PUSH_STATUS_FAILED,
    PUSH_STATUS_PENDING,
    PUSH_STATUS_SENT,
    PushNotification,
)
from taskhub.infrastructure.database import SessionLocal
from taskhub.infrastructure.push import FCMGateway, PushSendResult
from taskhub.infrastructure.repositories import PushNotificationRepository

from .guard import CycleGuard

logger = logging.getLogger(__name__)


class PushGateway(Protocol):
    def send_push_to_user(
        self,
        user_id: int,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> PushSendResult:
        ...


GatewayFactory = Callable[[Session], PushGateway]


def parse_push_data(raw: Any, *, push_id: int | None = None) -> dict[str, Any]:
    """Return the push ``data`` payload as a dictionary.

    Accepts an already structured value or a JSON-encoded string. Anything
    that cannot be read as an object becomes an empty payload.
    """

    if raw in (None, ""):
        return {}
    parsed = raw
    if isinstance(raw, (str, bytes)):
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Failed to parse FCM data for push %s", push_id)
            return {}
    if not isinstance(parsed, dict):
        logger.warning("Ignoring non-object FCM data for push %s", push_id)
        return {}
    return parsed


class PushDispatcher:
    """Poll the push queue and hand each entry to the push gateway.

    Entries are sent one at a time. A send that fails on every device is
    retried on later cycles until ``max_push_attempts`` is reached, after
    which the entry is ``FAILED``. Any successful device marks it ``SENT``.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        *,
        settings: Settings | None = None,
        gateway_factory: GatewayFactory | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._gateway_factory = gateway_factory or partial(FCMGateway, settings=self._settings)
        self._guard = CycleGuard()

    @property
    def is_processing(self) -> bool:
        return self._guard.held

    async def run_cycle(self) -> bool:
        """Run one polling cycle in a worker thread; ``False`` if one is running."""

        with self._guard.acquire() as acquired:
            if not acquired:
                return False
            await anyio.to_thread.run_sync(self._process_batch)
        return True

    def run_cycle_sync(self) -> bool:
        with self._guard.acquire() as acquired:
            if not acquired:
                return False
            self._process_batch()
        return True

    def _process_batch(self) -> int:
        session = self._session_factory()
        try:
            repository = PushNotificationRepository(session)
            pushes = repository.list_pending(
                limit=self._settings.push_batch_size,
                max_attempts=self._settings.max_push_attempts,
            )
            if not pushes:
                return 0

            logger.info("Processing %s push notification events...", len(pushes))
            gateway = self._gateway_factory(session)
            for push in pushes:
                self.deliver(session, gateway, push)
            return len(pushes)
        except Exception:
            session.rollback()
            logger.exception("Error processing push notification queue")
            return 0
        finally:
            session.close()

    def deliver(self, session: Session, gateway: PushGateway, push: PushNotification) -> str:
        """Send ``push`` once and persist the outcome; return the new status."""

        repository = PushNotificationRepository(session)
        attempts = push.attempts + 1
        max_attempts = self._settings.max_push_attempts
        exhausted_status = PUSH_STATUS_FAILED if attempts >= max_attempts else PUSH_STATUS_PENDING

        # Count the attempt before sending so a crash mid-send still uses it up.
        repository.record_attempt(
            push.id, status=PUSH_STATUS_PENDING, attempts=attempts, error_log=push.error_log
        )

        try:
            data = parse_push_data(push.data, push_id=push.id)
            result = gateway.send_push_to_user(push.user_id, push.title, push.body, data)
        except Exception as exc:
            session.rollback()
            logger.exception("Error sending push notification for user %s", push.user_id)
            status = exhausted_status
            error_log = f"Internal Error: {exc}"
        else:
            if result.failure_count > 0 and result.success_count == 0:
                status = exhausted_status
                logger.warning(
                    "Push notification failed for user %s. Attempts: %s",
                    push.user_id,
                    attempts,
                )
            else:
                status = PUSH_STATUS_SENT
            error_log = result.error_log

        repository.record_attempt(push.id, status=status, attempts=attempts, error_log=error_log)
        return status


__all__ = ["PushDispatcher", "PushGateway", "parse_push_data"]
