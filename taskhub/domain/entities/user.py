"""Domain entity representing a user."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

ROLE_SUPER_ADMIN = "SUPER_ADMIN"
ROLE_ADMIN = "ADMIN"
ROLE_TEAM_LEAD = "TEAM_LEAD"
ROLE_SR_DEVELOPER = "SR_DEVELOPER"
ROLE_EMPLOYEE = "EMPLOYEE"

ROLES = (
    ROLE_SUPER_ADMIN,
    ROLE_ADMIN,
    ROLE_TEAM_LEAD,
    ROLE_SR_DEVELOPER,
    ROLE_EMPLOYEE,
)


@dataclass
class User:
    """Core attributes describing an application user."""

    id: int | None
    name: str
    email: str
    role: str
    is_active: bool = True
    fcm_tokens: list[str] = field(default_factory=list)
    created_at: datetime | None = None


__all__ = [
    "User",
    "ROLES",
    "ROLE_SUPER_ADMIN",
    "ROLE_ADMIN",
    "ROLE_TEAM_LEAD",
    "ROLE_SR_DEVELOPER",
    "ROLE_EMPLOYEE",
]
