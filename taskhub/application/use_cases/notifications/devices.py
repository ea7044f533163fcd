"""Use cases for registering push-capable devices."""

from __future__ import annotations

from sqlalchemy.orm import Session

from taskhub.infrastructure.repositories import UserRepository


def register_device_token(session: Session, user_id: int, token: str) -> list[str]:
    """Add ``token`` to the devices of ``user_id`` and return the stored tokens."""

    token = (token or "").strip()
    if not token:
        raise ValueError("Token is required")

    repository = UserRepository(session)
    tokens = repository.get_fcm_tokens(user_id)
    if tokens is None:
        raise ValueError("User not found")
    if token not in tokens:
        tokens.append(token)
        repository.set_fcm_tokens(user_id, tokens)
    return tokens


def unregister_device_token(session: Session, user_id: int, token: str) -> list[str]:
    """Remove ``token`` from the devices of ``user_id``."""

    repository = UserRepository(session)
    tokens = repository.get_fcm_tokens(user_id)
    if tokens is None:
        raise ValueError("User not found")
    if token in tokens:
        tokens = [stored for stored in tokens if stored != token]
        repository.set_fcm_tokens(user_id, tokens)
    return tokens


__all__ = ["register_device_token", "unregister_device_token"]
