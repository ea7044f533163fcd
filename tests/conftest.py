"""Shared fixtures: a throwaway SQLite database and seeded users."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "taskhub_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["WORKERS_ENABLED"] = "false"
os.environ.pop("FIREBASE_CREDENTIALS_PATH", None)

from taskhub.config import get_settings  # noqa: E402

get_settings.cache_clear()

from taskhub.domain.entities import (  # noqa: E402
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
    ROLE_SUPER_ADMIN,
    ROLE_TEAM_LEAD,
    User,
)
from taskhub.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from taskhub.infrastructure.repositories import UserRepository  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure every test starts from an empty schema."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def anyio_backend():
    return "asyncio"


def create_user(
    session,
    *,
    name: str,
    role: str = ROLE_EMPLOYEE,
    is_active: bool = True,
    fcm_tokens: list[str] | None = None,
) -> User:
    """Insert a user whose email is derived from ``name``."""

    email = f"{name.lower().replace(' ', '.')}@example.com"
    return UserRepository(session).create(
        User(
            id=None,
            name=name,
            email=email,
            role=role,
            is_active=is_active,
            fcm_tokens=list(fcm_tokens or []),
        )
    )


@pytest.fixture()
def make_user(session):
    def _make_user(name: str, **kwargs) -> User:
        return create_user(session, name=name, **kwargs)

    return _make_user


@pytest.fixture()
def users(session) -> dict[str, User]:
    """A small organisation: one super admin, one admin, a lead and two developers."""

    return {
        "super_admin": create_user(session, name="Sara Super", role=ROLE_SUPER_ADMIN),
        "admin": create_user(session, name="Adam Admin", role=ROLE_ADMIN),
        "lead": create_user(session, name="Lena Lead", role=ROLE_TEAM_LEAD),
        "dev": create_user(session, name="Dan Dev", fcm_tokens=["token-dan"]),
        "dev2": create_user(session, name="Eve Dev"),
    }
