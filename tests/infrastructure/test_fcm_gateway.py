"""Tests for the FCM push gateway using a fake multicast transport."""

from __future__ import annotations

from types import SimpleNamespace

from firebase_admin import messaging

from taskhub.application.use_cases.notifications import register_device_token
from taskhub.infrastructure.database import SessionLocal
from taskhub.infrastructure.push import (
    INVALID_TOKEN_CODE,
    UNREGISTERED_TOKEN_CODE,
    FCMGateway,
    error_code,
    stringify_data,
)
from taskhub.infrastructure.repositories import UserRepository


class CodedError(Exception):
    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class FakeTransport:
    """Answer each token with the outcome configured for it."""

    def __init__(self, outcomes: dict[str, Exception | None] | None = None) -> None:
        self.outcomes = outcomes or {}
        self.messages: list[messaging.MulticastMessage] = []

    def __call__(self, message: messaging.MulticastMessage):
        self.messages.append(message)
        responses = [
            SimpleNamespace(success=self.outcomes.get(token) is None, exception=self.outcomes.get(token))
            for token in message.tokens
        ]
        successes = sum(1 for response in responses if response.success)
        return SimpleNamespace(
            success_count=successes,
            failure_count=len(responses) - successes,
            responses=responses,
        )


def _tokens(user_id: int) -> list[str] | None:
    with SessionLocal() as db:
        return UserRepository(db).get_fcm_tokens(user_id)


def test_send_to_every_device(session, make_user):
    user = make_user("Multi Device", fcm_tokens=["A", "B"])
    transport = FakeTransport()

    result = FCMGateway(session, send_multicast=transport).send_push_to_user(
        user.id, "Title", "Body", {"type": "TASK_ASSIGNED", "entity_id": 4}
    )

    assert (result.success_count, result.failure_count, result.error_log) == (2, 0, None)
    [message] = transport.messages
    assert message.tokens == ["A", "B"]
    assert message.notification.title == "Title"
    assert message.data["entity_id"] == "4"
    assert message.data["link"] == "/dashboard"


def test_unregistered_tokens_are_removed(session, make_user):
    user = make_user("Stale Device", fcm_tokens=["A", "B"])
    transport = FakeTransport({"A": CodedError(UNREGISTERED_TOKEN_CODE)})

    result = FCMGateway(session, send_multicast=transport).send_push_to_user(
        user.id, "Title", "Body"
    )

    assert result.success_count == 1
    assert result.failure_count == 1
    assert result.error_log == f"Token A: {UNREGISTERED_TOKEN_CODE}"
    assert _tokens(user.id) == ["B"]


def test_token_registered_during_send_survives_cleanup(session, make_user):
    user = make_user("Busy Device", fcm_tokens=["A", "B"])

    class RegisteringTransport(FakeTransport):
        def __call__(self, message):
            with SessionLocal() as other:
                register_device_token(other, user.id, "C")
            return super().__call__(message)

    transport = RegisteringTransport({"A": CodedError(UNREGISTERED_TOKEN_CODE)})

    FCMGateway(session, send_multicast=transport).send_push_to_user(user.id, "T", "B")

    assert transport.messages[0].tokens == ["A", "B"]
    assert _tokens(user.id) == ["B", "C"]


def test_transient_failures_keep_tokens(session, make_user):
    user = make_user("Flaky Device", fcm_tokens=["A", "B"])
    transport = FakeTransport(
        {"A": CodedError("messaging/internal-error"), "B": CodedError(INVALID_TOKEN_CODE)}
    )

    result = FCMGateway(session, send_multicast=transport).send_push_to_user(
        user.id, "Title", "Body"
    )

    assert result.success_count == 0
    assert result.error_log == (
        f"Token A: messaging/internal-error, Token B: {INVALID_TOKEN_CODE}"
    )
    assert _tokens(user.id) == ["A"]


def test_user_without_tokens_is_reported(session, make_user):
    user = make_user("No Device")
    transport = FakeTransport()

    result = FCMGateway(session, send_multicast=transport).send_push_to_user(
        user.id, "Title", "Body"
    )

    assert (result.success_count, result.failure_count) == (0, 0)
    assert result.error_log == "User has no registered tokens"
    assert transport.messages == []


def test_legacy_string_tokens_are_read(session, make_user):
    from taskhub.infrastructure.models import UserModel

    user = make_user("Legacy Device")
    model = session.get(UserModel, user.id)
    model.fcm_tokens = '["A", "A", "B"]'
    session.commit()

    transport = FakeTransport()
    FCMGateway(session, send_multicast=transport).send_push_to_user(user.id, "T", "B")

    assert transport.messages[0].tokens == ["A", "B"]


def test_https_link_becomes_webpush_option(session, make_user):
    user = make_user("Web Device", fcm_tokens=["A"])
    transport = FakeTransport()

    FCMGateway(session, send_multicast=transport).send_push_to_user(
        user.id, "T", "B", {"url": "https://app.example.com/tasks/1"}
    )

    [message] = transport.messages
    assert message.webpush.fcm_options.link == "https://app.example.com/tasks/1"
    assert "link" not in message.data


def test_missing_firebase_configuration_is_reported(session, make_user):
    user = make_user("Unconfigured", fcm_tokens=["A"])

    result = FCMGateway(session).send_push_to_user(user.id, "T", "B")

    assert (result.success_count, result.failure_count) == (0, 0)
    assert result.error_log.startswith("Firebase not properly initialized")


def test_stringify_data():
    assert stringify_data({"a": 1, "b": None, "c": {"d": 2}, "e": [1], "f": True}) == {
        "a": "1",
        "b": "",
        "c": '{"d": 2}',
        "e": "[1]",
        "f": "True",
    }
    assert stringify_data(None) == {}


def test_error_code_maps_unregistered_error():
    assert error_code(messaging.UnregisteredError("gone")) == UNREGISTERED_TOKEN_CODE
    assert error_code(None) == "unknown-error"
    assert error_code(ValueError("bad")) == "ValueError"
