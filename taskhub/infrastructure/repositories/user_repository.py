"""Persistence layer for user data."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from sqlalchemy.orm import Session

from taskhub.domain.entities import User
from taskhub.infrastructure.models import UserModel
from taskhub.utils import ensure_app_timezone


def parse_fcm_tokens(raw: Any) -> list[str]:
    """Return the device tokens stored in ``raw`` without duplicates.

    Tokens are normally stored as a JSON array, but older rows hold the array
    JSON-encoded as a string. Anything unparseable yields an empty list.
    """

    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return []
    if not isinstance(raw, list):
        return []

    tokens: list[str] = []
    for token in raw:
        if isinstance(token, str) and token and token not in tokens:
            tokens.append(token)
    return tokens


class UserRepository:
    """Provide the user operations needed by the notification pipeline."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self.session.query(UserModel).filter_by(email=email).first()
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            name=user.name,
            email=user.email,
            role=user.role,
            is_active=user.is_active,
            fcm_tokens=list(user.fcm_tokens),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_active_ids_by_role(self, role: str) -> list[int]:
        query = (
            self.session.query(UserModel.id)
            .filter(UserModel.role == role)
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id)
        )
        return [user_id for (user_id,) in query.all()]

    def get_fcm_tokens(self, user_id: int) -> list[str] | None:
        """Return the user's device tokens, or ``None`` if the user does not exist."""

        model = self.session.get(UserModel, user_id)
        if model is None:
            return None
        return parse_fcm_tokens(model.fcm_tokens)

    def set_fcm_tokens(self, user_id: int, tokens: Iterable[str]) -> None:
        model = self.session.get(UserModel, user_id)
        if model is None:
            msg = f"User with id {user_id} not found"
            raise ValueError(msg)
        model.fcm_tokens = parse_fcm_tokens(list(tokens))
        self.session.add(model)
        self.session.commit()

    def remove_fcm_tokens(self, user_id: int, stale: Iterable[str]) -> list[str]:
        """Drop ``stale`` from the tokens currently stored for ``user_id``.

        The row is re-read under a row lock so tokens registered since the
        caller last loaded the user are kept.
        """

        model = (
            self.session.query(UserModel)
            .filter(UserModel.id == user_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )
        if model is None:
            self.session.rollback()
            return []
        stale_tokens = set(stale)
        remaining = [
            token for token in parse_fcm_tokens(model.fcm_tokens) if token not in stale_tokens
        ]
        model.fcm_tokens = remaining
        self.session.add(model)
        self.session.commit()
        return remaining

    def clear_all_fcm_tokens(self) -> int:
        updated = (
            self.session.query(UserModel)
            .filter(UserModel.fcm_tokens.isnot(None))
            .update({UserModel.fcm_tokens: None}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            role=model.role,
            is_active=model.is_active,
            fcm_tokens=parse_fcm_tokens(model.fcm_tokens),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["UserRepository", "parse_fcm_tokens"]
