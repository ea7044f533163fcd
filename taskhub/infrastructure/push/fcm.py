"""Firebase Cloud Messaging transport with stale-token cleanup."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import firebase_admin
from firebase_admin import credentials, exceptions, messaging
from sqlalchemy.orm import Session

from taskhub.config import Settings, get_settings
from taskhub.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "taskhub"

INVALID_TOKEN_CODE = "messaging/invalid-registration-token"
UNREGISTERED_TOKEN_CODE = "messaging/registration-token-not-registered"
STALE_TOKEN_CODES = frozenset({INVALID_TOKEN_CODE, UNREGISTERED_TOKEN_CODE})

SendMulticast = Callable[[messaging.MulticastMessage], Any]

_app_lock = threading.Lock()


class PushConfigurationError(RuntimeError):
    """Raised when the Firebase app cannot be initialized."""


@dataclass(frozen=True)
class PushSendResult:
    """Outcome of one multicast send to every device of a user."""

    success_count: int
    failure_count: int
    error_log: str | None = None


def get_firebase_app(settings: Settings | None = None) -> firebase_admin.App:
    """Return the shared Firebase app, initializing it on first use."""

    settings = settings or get_settings()
    with _app_lock:
        try:
            return firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            pass

        if not settings.firebase_credentials_path:
            raise PushConfigurationError("FIREBASE_CREDENTIALS_PATH is not configured")
        try:
            credential = credentials.Certificate(settings.firebase_credentials_path)
        except (OSError, ValueError) as exc:
            raise PushConfigurationError(
                f"Could not load Firebase credentials: {exc}"
            ) from exc

        app = firebase_admin.initialize_app(
            credential,
            options={"httpTimeout": settings.push_send_timeout_seconds},
            name=FIREBASE_APP_NAME,
        )
        logger.info("Firebase app initialized for push delivery")
        return app


def _default_send_multicast(message: messaging.MulticastMessage) -> Any:
    return messaging.send_each_for_multicast(message, app=get_firebase_app())


def stringify_data(data: Mapping[str, Any] | None) -> dict[str, str]:
    """Return ``data`` with every value converted to a string.

    FCM only accepts string key/value pairs in the data payload.
    """

    normalized: dict[str, str] = {}
    for key, value in (data or {}).items():
        if value is None:
            normalized[str(key)] = ""
        elif isinstance(value, (dict, list)):
            normalized[str(key)] = json.dumps(value)
        else:
            normalized[str(key)] = str(value)
    return normalized


def error_code(exc: BaseException | None) -> str:
    """Return a stable error code for a per-token send failure."""

    if exc is None:
        return "unknown-error"
    if isinstance(exc, messaging.UnregisteredError):
        return UNREGISTERED_TOKEN_CODE
    if isinstance(exc, exceptions.InvalidArgumentError) and "registration token" in str(exc).lower():
        return INVALID_TOKEN_CODE
    code = getattr(exc, "code", None)
    return str(code) if code else type(exc).__name__


class FCMGateway:
    """Send multicast pushes to the devices registered for a user."""

    def __init__(
        self,
        session: Session,
        *,
        send_multicast: SendMulticast | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.session = session
        self._users = UserRepository(session)
        self._send_multicast = send_multicast or _default_send_multicast
        self._settings = settings or get_settings()

    def send_push_to_user(
        self,
        user_id: int,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> PushSendResult:
        """Deliver a notification to every device of ``user_id``.

        Provider-level failures are reported through the result instead of
        raised. Tokens the provider reports as invalid or unregistered are
        removed from the user record.
        """

        if self._send_multicast is _default_send_multicast:
            try:
                get_firebase_app(self._settings)
            except PushConfigurationError as exc:
                logger.warning("Push delivery unavailable: %s", exc)
                return PushSendResult(0, 0, f"Firebase not properly initialized: {exc}")

        tokens = self._users.get_fcm_tokens(user_id)
        if not tokens:
            return PushSendResult(0, 0, "User has no registered tokens")

        string_data = stringify_data(data)
        link = string_data.get("url") or self._settings.push_default_link
        webpush_options = None
        if link.startswith("https://"):
            webpush_options = messaging.WebpushFCMOptions(link=link)
        else:
            string_data.setdefault("link", link)

        message = messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=title, body=body),
            data=string_data,
            webpush=messaging.WebpushConfig(
                notification=messaging.WebpushNotification(
                    icon="/favicon.ico", require_interaction=True
                ),
                fcm_options=webpush_options,
            ),
        )
        response = self._send_multicast(message)

        if not response.failure_count:
            return PushSendResult(response.success_count, 0, None)

        stale_tokens: list[str] = []
        details: list[str] = []
        for token, send_response in zip(tokens, response.responses):
            if send_response.success:
                continue
            code = error_code(send_response.exception)
            details.append(f"Token {token}: {code}")
            if code in STALE_TOKEN_CODES:
                stale_tokens.append(token)

        if stale_tokens:
            self._users.remove_fcm_tokens(user_id, stale_tokens)
            logger.info(
                "Cleaned up %s invalid tokens for user %s", len(stale_tokens), user_id
            )

        return PushSendResult(
            response.success_count,
            response.failure_count,
            ", ".join(details) if details else None,
        )


__all__ = [
    "FCMGateway",
    "PushConfigurationError",
    "PushSendResult",
    "get_firebase_app",
    "stringify_data",
    "error_code",
    "INVALID_TOKEN_CODE",
    "UNREGISTERED_TOKEN_CODE",
]
