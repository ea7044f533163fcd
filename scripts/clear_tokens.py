"""Remove every registered device token."""

from __future__ import annotations

import argparse

from taskhub.infrastructure.database import SessionLocal, initialize_database
from taskhub.infrastructure.repositories import UserRepository


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Clear the FCM device tokens of all users.",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if not args.yes:
        answer = input("This removes the device tokens of every user. Continue? [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            raise SystemExit("Aborted.")

    initialize_database()

    session = SessionLocal()
    try:
        cleared = UserRepository(session).clear_all_fcm_tokens()
    finally:
        session.close()

    print(f"Cleared device tokens for {cleared} users.")


if __name__ == "__main__":
    main()
