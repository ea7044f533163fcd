"""Utility script to create a user that can receive notifications."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from taskhub.domain.entities import ROLE_SUPER_ADMIN, ROLES, User
from taskhub.infrastructure.database import SessionLocal, initialize_database
from taskhub.infrastructure.repositories import UserRepository
from taskhub.infrastructure.security import create_user_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Create an initial user for the TaskHub notification service.",
    )
    parser.add_argument(
        "--name",
        default="Administrator",
        help="Full name of the user (default: Administrator)",
    )
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Email of the user (default: admin@example.com)",
    )
    parser.add_argument(
        "--role",
        default=ROLE_SUPER_ADMIN,
        choices=sorted(ROLES),
        help=f"Role of the user (default: {ROLE_SUPER_ADMIN})",
    )
    parser.add_argument(
        "--print-token",
        action="store_true",
        help="Print an access token for the new user.",
    )
    return parser.parse_args()


def main() -> None:
    """Create a user using the provided command line arguments."""

    args = parse_args()

    initialize_database()

    session = SessionLocal()
    try:
        repository = UserRepository(session)
        if repository.get_by_email(args.email) is not None:
            raise SystemExit(f"A user with email {args.email} already exists.")
        user = repository.create(
            User(id=None, name=args.name, email=args.email, role=args.role)
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Error saving the user to the database: {exc}") from exc
    finally:
        session.close()

    print(
        "User created successfully:\n"
        f"  ID: {user.id}\n"
        f"  Name: {user.name}\n"
        f"  Email: {user.email}\n"
        f"  Role: {user.role}"
    )
    if args.print_token:
        print(f"  Token: {create_user_token(user.id)}")


if __name__ == "__main__":
    main()
