"""Role-holder sets used to broadcast notifications to privileged users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session

from taskhub.domain.entities import ROLE_ADMIN, ROLE_SUPER_ADMIN
from taskhub.infrastructure.repositories import UserRepository


@dataclass(frozen=True)
class RoleSets:
    """Identifiers of the active super administrators and administrators."""

    super_admins: tuple[int, ...] = ()
    admins: tuple[int, ...] = ()

    @property
    def privileged(self) -> tuple[int, ...]:
        """Super administrators followed by administrators."""

        return self.super_admins + self.admins


class PrivilegedUsersProvider(Protocol):
    """Source of the role sets loaded once per dispatch cycle."""

    def load_role_sets(self) -> RoleSets:
        ...


class DatabasePrivilegedUsersProvider:
    """Load the role sets from the user table."""

    def __init__(self, session: Session) -> None:
        self._users = UserRepository(session)

    def load_role_sets(self) -> RoleSets:
        return RoleSets(
            super_admins=tuple(self._users.list_active_ids_by_role(ROLE_SUPER_ADMIN)),
            admins=tuple(self._users.list_active_ids_by_role(ROLE_ADMIN)),
        )


class StaticPrivilegedUsersProvider:
    """Return a fixed :class:`RoleSets`, regardless of the stored users."""

    def __init__(self, role_sets: RoleSets) -> None:
        self._role_sets = role_sets

    def load_role_sets(self) -> RoleSets:
        return self._role_sets


__all__ = [
    "RoleSets",
    "PrivilegedUsersProvider",
    "DatabasePrivilegedUsersProvider",
    "StaticPrivilegedUsersProvider",
]
