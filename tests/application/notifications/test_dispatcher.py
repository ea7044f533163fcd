"""Tests for the notification fan-out dispatcher."""

from __future__ import annotations

import threading

import anyio
import pytest

from taskhub.application.notifications import (
    ROUTING_TABLE,
    DatabasePrivilegedUsersProvider,
    NotificationDispatcher,
    RoleSets,
    RoutingRule,
    StaticPrivilegedUsersProvider,
)
from taskhub.application.use_cases.notifications import queue_event, update_preference
from taskhub.config import get_settings
from taskhub.domain import events
from taskhub.infrastructure.database import SessionLocal
from taskhub.infrastructure.repositories import (
    DomainEventRepository,
    NotificationRepository,
    PushNotificationRepository,
)


def _dispatcher(**kwargs) -> NotificationDispatcher:
    return NotificationDispatcher(SessionLocal, **kwargs)


def _notifications_for(user_id: int):
    with SessionLocal() as db:
        return NotificationRepository(db).list_for_user(user_id, limit=None)


def _event(event_id: int):
    with SessionLocal() as db:
        return DomainEventRepository(db).get(event_id)


def _pushes():
    with SessionLocal() as db:
        return PushNotificationRepository(db).list_recent(limit=100)


def _task_assigned(session, users, **overrides):
    payload = {
        "actor_id": users["lead"].id,
        "actor_name": users["lead"].name,
        "task_id": 10,
        "task_title": "Write tests",
        "assignees": [users["dev"].id, users["dev2"].id],
        "team_lead_id": users["lead"].id,
    }
    payload.update(overrides)
    event = queue_event(session, events.TASK_ASSIGNED, payload)
    session.commit()
    return event


def test_cycle_creates_notifications_and_marks_event_processed(session, users):
    event = _task_assigned(session, users)

    assert _dispatcher().run_cycle_sync() is True

    assert _event(event.id).processed is True
    [notification] = _notifications_for(users["dev"].id)
    assert notification.type == events.TASK_ASSIGNED
    assert notification.title == "New Task Assigned"
    assert notification.entity_type == events.ENTITY_TASK
    assert notification.entity_id == 10
    assert notification.is_read is False
    assert len(_notifications_for(users["dev2"].id)) == 1
    assert _notifications_for(users["lead"].id) == []


def test_processed_events_are_not_dispatched_twice(session, users):
    _task_assigned(session, users)
    dispatcher = _dispatcher()

    dispatcher.run_cycle_sync()
    dispatcher.run_cycle_sync()

    assert len(_notifications_for(users["dev"].id)) == 1


def test_unknown_event_is_processed_without_notifications(session, users):
    event = queue_event(session, "LEGACY_EVENT", {"actor_id": users["dev"].id})
    session.commit()

    _dispatcher().run_cycle_sync()

    assert _event(event.id).processed is True
    for user in users.values():
        assert _notifications_for(user.id) == []


def test_in_app_preference_suppresses_notification(session, users):
    update_preference(
        session, users["dev"].id, event_type=events.TASK_ASSIGNED, in_app=False, push=False
    )
    event = _task_assigned(session, users)

    _dispatcher().run_cycle_sync()

    assert _event(event.id).processed is True
    assert _notifications_for(users["dev"].id) == []
    assert len(_notifications_for(users["dev2"].id)) == 1


def test_preferences_for_other_event_types_do_not_apply(session, users):
    update_preference(session, users["dev"].id, event_type=events.MENTIONED, in_app=False)
    _task_assigned(session, users)

    _dispatcher().run_cycle_sync()

    assert len(_notifications_for(users["dev"].id)) == 1


def test_role_sets_come_from_active_users(session, users, make_user):
    make_user("Old Admin", role="ADMIN", is_active=False)

    role_sets = DatabasePrivilegedUsersProvider(session).load_role_sets()

    assert role_sets.super_admins == (users["super_admin"].id,)
    assert role_sets.admins == (users["admin"].id,)


def test_broadcast_skips_the_acting_admin(session, users):
    queue_event(
        session,
        events.CRITICAL_TASK_ASSIGNED,
        {"actor_id": users["admin"].id, "task_id": 3, "task_title": "Outage"},
    )
    session.commit()

    _dispatcher().run_cycle_sync()

    assert len(_notifications_for(users["super_admin"].id)) == 1
    assert _notifications_for(users["admin"].id) == []


def test_push_is_enqueued_for_each_notification(session, users):
    update_preference(
        session, users["dev2"].id, event_type=events.TASK_ASSIGNED, in_app=True, push=False
    )
    _task_assigned(session, users)

    _dispatcher().run_cycle_sync()

    [push] = _pushes()
    [notification] = _notifications_for(users["dev"].id)
    assert push.user_id == users["dev"].id
    assert push.title == notification.title
    assert push.body == notification.message
    assert push.status == "PENDING"
    assert push.data == {
        "type": events.TASK_ASSIGNED,
        "notification_id": notification.id,
        "entity_type": events.ENTITY_TASK,
        "entity_id": 10,
    }


def test_push_enqueue_can_be_disabled(session, users):
    settings = get_settings().model_copy(update={"push_on_notification": False})
    _task_assigned(session, users)

    _dispatcher(settings=settings).run_cycle_sync()

    assert len(_notifications_for(users["dev"].id)) == 1
    assert _pushes() == []


def _failing_table(event_type):
    def explode(payload, role_sets):
        raise RuntimeError("boom")

    table = dict(ROUTING_TABLE)
    table[event_type] = RoutingRule(ROUTING_TABLE[event_type].payload_model, explode)
    return table


def test_failing_event_is_retried_and_then_retired(session, users):
    settings = get_settings().model_copy(update={"max_event_attempts": 2})
    event = queue_event(session, events.ESCALATION, {"task_title": "Late"})
    session.commit()
    dispatcher = _dispatcher(
        settings=settings,
        role_provider_factory=lambda db: StaticPrivilegedUsersProvider(RoleSets()),
        routing_table=_failing_table(events.ESCALATION),
    )

    dispatcher.run_cycle_sync()
    first = _event(event.id)
    assert first.processed is False
    assert first.attempts == 1
    assert first.error_log == "RuntimeError: boom"

    dispatcher.run_cycle_sync()
    retired = _event(event.id)
    assert retired.processed is True
    assert retired.attempts == 2


def test_failure_leaves_later_events_for_the_next_cycle(session, users):
    failing = queue_event(session, events.ESCALATION, {"task_title": "Late"})
    session.commit()
    later = _task_assigned(session, users)
    dispatcher = _dispatcher(routing_table=_failing_table(events.ESCALATION))

    dispatcher.run_cycle_sync()

    assert _event(failing.id).processed is False
    assert _event(later.id).processed is False
    assert _notifications_for(users["dev"].id) == []


def test_failed_event_rolls_back_its_notifications(session, users, monkeypatch):
    def fail_mark_processed(self, event_id, *, commit=True):
        raise RuntimeError("database went away")

    monkeypatch.setattr(
        DomainEventRepository, "mark_processed", fail_mark_processed
    )
    event = _task_assigned(session, users)

    _dispatcher().run_cycle_sync()

    failed = _event(event.id)
    assert failed.processed is False
    assert failed.attempts == 1
    assert failed.error_log == "RuntimeError: database went away"
    assert _notifications_for(users["dev"].id) == []
    assert _pushes() == []


@pytest.mark.anyio
async def test_overlapping_cycles_are_skipped(session, users):
    started = threading.Event()
    release = threading.Event()

    class BlockingRoleProvider:
        def __init__(self, db):
            pass

        def load_role_sets(self):
            started.set()
            release.wait(timeout=5)
            return RoleSets()

    _task_assigned(session, users)
    dispatcher = _dispatcher(role_provider_factory=BlockingRoleProvider)
    results: list[bool] = []

    async def first_cycle():
        results.append(await dispatcher.run_cycle())

    async with anyio.create_task_group() as tg:
        tg.start_soon(first_cycle)
        await anyio.to_thread.run_sync(started.wait, 5)
        assert dispatcher.is_processing is True
        assert await dispatcher.run_cycle() is False
        release.set()

    assert results == [True]
    assert dispatcher.is_processing is False
    assert len(_notifications_for(users["dev"].id)) == 1
