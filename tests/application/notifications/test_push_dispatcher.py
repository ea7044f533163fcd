"""Tests for the push delivery dispatcher."""

from __future__ import annotations

import logging

import pytest

from taskhub.application.notifications import PushDispatcher, parse_push_data
from taskhub.config import get_settings
from taskhub.domain.entities import PushNotification
from taskhub.infrastructure.database import SessionLocal
from taskhub.infrastructure.push import PushSendResult
from taskhub.infrastructure.repositories import PushNotificationRepository


class FakeGateway:
    """Record the sends and answer with a canned result."""

    def __init__(self, result=None, error=None):
        self.result = result or PushSendResult(1, 0, None)
        self.error = error
        self.calls = []

    def __call__(self, session):
        return self

    def send_push_to_user(self, user_id, title, body, data=None):
        self.calls.append((user_id, title, body, data))
        if self.error is not None:
            raise self.error
        return self.result


def _enqueue(session, user_id, **overrides) -> PushNotification:
    values = {"title": "Hello", "body": "World", "data": {"type": "TEST"}}
    values.update(overrides)
    return PushNotificationRepository(session).create(
        PushNotification(id=None, user_id=user_id, **values)
    )


def _reload(push_id: int) -> PushNotification:
    with SessionLocal() as db:
        return PushNotificationRepository(db).get(push_id)


def test_successful_send_marks_entry_sent(session, users):
    push = _enqueue(session, users["dev"].id)
    gateway = FakeGateway()

    assert PushDispatcher(SessionLocal, gateway_factory=gateway).run_cycle_sync() is True

    stored = _reload(push.id)
    assert stored.status == "SENT"
    assert stored.attempts == 1
    assert stored.error_log is None
    assert gateway.calls == [(users["dev"].id, "Hello", "World", {"type": "TEST"})]


def test_complete_failure_on_last_attempt_marks_entry_failed(session, users):
    push = _enqueue(session, users["dev"].id, attempts=2)
    gateway = FakeGateway(PushSendResult(0, 1, "Token token-dan: messaging/internal-error"))

    PushDispatcher(SessionLocal, gateway_factory=gateway).run_cycle_sync()

    stored = _reload(push.id)
    assert stored.is_terminal
    assert stored.status == "FAILED"
    assert stored.attempts == 3
    assert stored.error_log == "Token token-dan: messaging/internal-error"


def test_complete_failure_with_attempts_left_stays_pending(session, users):
    push = _enqueue(session, users["dev"].id)
    gateway = FakeGateway(PushSendResult(0, 2, "Token a: x, Token b: y"))
    dispatcher = PushDispatcher(SessionLocal, gateway_factory=gateway)

    dispatcher.run_cycle_sync()
    assert _reload(push.id).status == "PENDING"

    dispatcher.run_cycle_sync()
    dispatcher.run_cycle_sync()
    dispatcher.run_cycle_sync()

    stored = _reload(push.id)
    assert stored.status == "FAILED"
    assert stored.attempts == 3
    assert len(gateway.calls) == 3


def test_partial_success_counts_as_sent(session, users):
    push = _enqueue(session, users["dev"].id)
    gateway = FakeGateway(PushSendResult(1, 1, "Token stale: messaging/registration-token-not-registered"))

    PushDispatcher(SessionLocal, gateway_factory=gateway).run_cycle_sync()

    stored = _reload(push.id)
    assert stored.status == "SENT"
    assert stored.attempts == 1
    assert stored.error_log == "Token stale: messaging/registration-token-not-registered"


def test_user_without_devices_is_not_retried(session, users):
    push = _enqueue(session, users["dev2"].id)
    gateway = FakeGateway(PushSendResult(0, 0, "User has no registered tokens"))

    PushDispatcher(SessionLocal, gateway_factory=gateway).run_cycle_sync()

    stored = _reload(push.id)
    assert stored.status == "SENT"
    assert stored.error_log == "User has no registered tokens"


def test_gateway_exception_is_recorded_as_internal_error(session, users):
    push = _enqueue(session, users["dev"].id)
    gateway = FakeGateway(error=RuntimeError("connection reset"))

    PushDispatcher(SessionLocal, gateway_factory=gateway).run_cycle_sync()

    stored = _reload(push.id)
    assert stored.status == "PENDING"
    assert stored.attempts == 1
    assert stored.error_log == "Internal Error: connection reset"


def test_gateway_exception_does_not_stop_the_batch(session, users):
    first = _enqueue(session, users["dev"].id)
    second = _enqueue(session, users["dev2"].id)

    class FlakyGateway(FakeGateway):
        def send_push_to_user(self, user_id, title, body, data=None):
            if user_id == users["dev"].id:
                raise RuntimeError("boom")
            return super().send_push_to_user(user_id, title, body, data)

    PushDispatcher(SessionLocal, gateway_factory=FlakyGateway()).run_cycle_sync()

    assert _reload(first.id).error_log == "Internal Error: boom"
    assert _reload(second.id).status == "SENT"


def test_string_data_is_decoded_before_sending(session, users):
    _enqueue(session, users["dev"].id, data='{"url": "https://example.com/tasks/1"}')
    gateway = FakeGateway()

    PushDispatcher(SessionLocal, gateway_factory=gateway).run_cycle_sync()

    assert gateway.calls[0][3] == {"url": "https://example.com/tasks/1"}


def test_terminal_entries_are_not_picked_up(session, users):
    _enqueue(session, users["dev"].id, status="SENT", attempts=1)
    _enqueue(session, users["dev"].id, status="FAILED", attempts=3)
    gateway = FakeGateway()

    PushDispatcher(SessionLocal, gateway_factory=gateway).run_cycle_sync()

    assert gateway.calls == []


def test_default_gateway_uses_the_dispatcher_settings(session, users, tmp_path):
    settings = get_settings().model_copy(
        update={"firebase_credentials_path": str(tmp_path / "missing-service-account.json")}
    )
    push = _enqueue(session, users["dev"].id)

    PushDispatcher(SessionLocal, settings=settings).run_cycle_sync()

    stored = _reload(push.id)
    assert stored.status == "SENT"
    assert "Could not load Firebase credentials" in stored.error_log


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, {}),
        ("", {}),
        ({"a": 1}, {"a": 1}),
        ('{"a": 1}', {"a": 1}),
        ("not json", {}),
        ("[1, 2]", {}),
    ],
)
def test_parse_push_data(raw, expected):
    assert parse_push_data(raw, push_id=1) == expected


def test_parse_push_data_logs_malformed_payload(caplog):
    with caplog.at_level(logging.WARNING):
        parse_push_data("{broken", push_id=7)

    assert "Failed to parse FCM data for push 7" in caplog.text
