"""Enqueue a test push notification for one user and optionally deliver it."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from taskhub.application.notifications import PushDispatcher
from taskhub.application.use_cases.notifications import enqueue_push
from taskhub.infrastructure.database import SessionLocal, initialize_database
from taskhub.infrastructure.repositories import PushNotificationRepository, UserRepository


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send a test push notification through the push queue.",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--user-id", type=int, help="Identifier of the target user")
    target.add_argument("--email", help="Email of the target user")
    parser.add_argument("--title", default="Test notification", help="Notification title")
    parser.add_argument(
        "--body",
        default="This is a test push notification.",
        help="Notification body",
    )
    parser.add_argument("--url", default=None, help="Link opened when the push is clicked")
    parser.add_argument(
        "--deliver",
        action="store_true",
        help="Run one push dispatcher cycle right away instead of waiting for the worker",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    initialize_database()

    session = SessionLocal()
    try:
        users = UserRepository(session)
        user = users.get(args.user_id) if args.user_id else users.get_by_email(args.email)
        if user is None:
            raise SystemExit("User not found.")
        if not user.fcm_tokens:
            print(f"Warning: user {user.id} has no registered device tokens.")

        data = {"type": "TEST"}
        if args.url:
            data["url"] = args.url
        push = enqueue_push(
            session, user_id=user.id, title=args.title, body=args.body, data=data
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Could not enqueue the push: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error while enqueuing the push: {exc}") from exc
    finally:
        session.close()

    print(f"Push {push.id} queued for user {push.user_id}.")

    if args.deliver:
        PushDispatcher().run_cycle_sync()
        session = SessionLocal()
        try:
            delivered = PushNotificationRepository(session).get(push.id)
        finally:
            session.close()
        if delivered is not None:
            print(f"Status: {delivered.status} (attempts: {delivered.attempts})")
            if delivered.error_log:
                print(f"Error log: {delivered.error_log}")


if __name__ == "__main__":
    main()
