"""Print the most recent entries of the event and push queues."""

from __future__ import annotations

import argparse

from taskhub.infrastructure.database import SessionLocal, initialize_database
from taskhub.infrastructure.repositories import (
    DomainEventRepository,
    PushNotificationRepository,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show the latest domain events and push deliveries.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of rows to show per queue (default: 10)",
    )
    return parser.parse_args()


def main() -> None:
    """Dump both queues to stdout, newest first."""

    args = parse_args()
    if args.limit <= 0:
        raise SystemExit("--limit must be a positive number")

    initialize_database()

    session = SessionLocal()
    try:
        events = DomainEventRepository(session).list_recent(limit=args.limit)
        pushes = PushNotificationRepository(session).list_recent(limit=args.limit)
    finally:
        session.close()

    print("--- Notification queue ---")
    for event in events:
        print(
            f"[{event.id}] {event.event_type} processed={event.processed} "
            f"attempts={event.attempts} created={event.created_at:%Y-%m-%d %H:%M:%S}"
        )
        if event.error_log:
            print(f"    error: {event.error_log}")
    if not events:
        print("(empty)")

    print("\n--- Push notification queue ---")
    for push in pushes:
        print(
            f"[{push.id}] user={push.user_id} status={push.status} "
            f"attempts={push.attempts} title={push.title!r}"
        )
        if push.error_log:
            print(f"    error: {push.error_log}")
    if not pushes:
        print("(empty)")


if __name__ == "__main__":
    main()
