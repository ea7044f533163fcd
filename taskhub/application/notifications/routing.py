"""Routing table mapping each event type to the users it notifies.

Every rule pairs the payload model of an event type with a pure resolver
``(payload, role_sets) -> list[RecipientDirective]``. Resolvers may list
the same user more than once; :func:`select_recipients` keeps the first
directive per user and drops the acting user.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from taskhub.domain import events
from taskhub.domain.events import (
    AdminCreatedPayload,
    EventPayload,
    MentionPayload,
    ProjectPayload,
    SubmissionPayload,
    TaskPayload,
    TeamPayload,
)

from .roles import RoleSets

REVIEW_OR_DONE_STATUSES = frozenset(
    {"VERIFIED", "DONE", "COMPLETED", "SUBMITTED", "PENDING_REVIEW"}
)
UNDER_REVIEW_STATUSES = frozenset({"SUBMITTED", "PENDING_REVIEW"})


@dataclass(frozen=True)
class RecipientDirective:
    """A notification that should be created for ``user_id``."""

    user_id: int
    type: str
    title: str
    message: str
    entity_type: str | None = None
    entity_id: int | None = None


Resolver = Callable[[Any, RoleSets], list[RecipientDirective]]


@dataclass(frozen=True)
class RoutingRule:
    payload_model: type[EventPayload]
    resolve: Resolver


def _notify(
    user_ids: Iterable[int | None],
    type_: str,
    title: str,
    message: str,
    entity_type: str | None = None,
    entity_id: int | None = None,
) -> list[RecipientDirective]:
    return [
        RecipientDirective(user_id, type_, title, message, entity_type, entity_id)
        for user_id in user_ids
        if user_id
    ]


def _actor(payload: EventPayload, default: str = "System") -> str:
    return payload.actor_name or default


def _team_created(payload: TeamPayload, roles: RoleSets) -> list[RecipientDirective]:
    directives = _notify(
        roles.privileged,
        events.TEAM_CREATED,
        "New Team Created",
        f"Team {payload.team_name} has been created.",
        events.ENTITY_TEAM,
        payload.team_id,
    )
    directives += _notify(
        [payload.lead_id],
        events.TEAM_LEAD_ASSIGNED,
        "Assigned as Team Lead",
        f"You have been assigned as the lead for team {payload.team_name}.",
        events.ENTITY_TEAM,
        payload.team_id,
    )
    return directives


def _project_created(payload: ProjectPayload, roles: RoleSets) -> list[RecipientDirective]:
    title = "New Project Created"
    directives = _notify(
        roles.super_admins,
        events.PROJECT_CREATED,
        title,
        f"Project {payload.project_name} has been created.",
        events.ENTITY_PROJECT,
        payload.project_id,
    )
    directives += _notify(
        roles.admins,
        events.PROJECT_CREATED,
        title,
        f"Project {payload.project_name} has been created in your organization.",
        events.ENTITY_PROJECT,
        payload.project_id,
    )
    return directives


def _mentioned(payload: MentionPayload, roles: RoleSets) -> list[RecipientDirective]:
    actor = _actor(payload, "Someone")
    mentioned = set(payload.mentioned_users)
    directives = _notify(
        payload.mentioned_users,
        events.MENTIONED,
        "You were mentioned",
        f"{actor} mentioned you in a comment.",
        payload.entity_type,
        payload.entity_id,
    )
    # Privileged users only get a mention when they were actually mentioned.
    directives += _notify(
        [user_id for user_id in roles.privileged if user_id in mentioned],
        events.MENTIONED,
        "You were mentioned",
        f"{actor} mentioned you.",
        payload.entity_type,
        payload.entity_id,
    )
    return directives


def _task_assigned(payload: TaskPayload, roles: RoleSets) -> list[RecipientDirective]:
    directives = _notify(
        payload.assignees,
        events.TASK_ASSIGNED,
        "New Task Assigned",
        f"You have been assigned to task: {payload.task_title}",
        events.ENTITY_TASK,
        payload.task_id,
    )
    directives += _notify(
        [payload.team_lead_id],
        events.TASK_ASSIGNED,
        "Task Assigned to Team",
        f"Task {payload.task_title} was assigned to your team.",
        events.ENTITY_TASK,
        payload.task_id,
    )
    return directives


def _critical_task_assigned(payload: TaskPayload, roles: RoleSets) -> list[RecipientDirective]:
    return _notify(
        roles.privileged,
        events.CRITICAL_TASK_ASSIGNED,
        "Critical Task Assigned",
        f'A critical priority task "{payload.task_title}" was created/assigned.',
        events.ENTITY_TASK,
        payload.task_id,
    )


def _deadline_approaching(payload: TaskPayload, roles: RoleSets) -> list[RecipientDirective]:
    title = "Deadline Approaching"
    message = f"The deadline for task {payload.task_title} is approaching."
    directives = _notify(
        payload.assignees,
        events.DEADLINE_APPROACHING,
        title,
        message,
        events.ENTITY_TASK,
        payload.task_id,
    )
    directives += _notify(
        [payload.team_lead_id],
        events.DEADLINE_APPROACHING,
        title,
        f"The deadline for team task {payload.task_title} is approaching.",
        events.ENTITY_TASK,
        payload.task_id,
    )
    directives += _notify(
        roles.admins + roles.super_admins,
        events.DEADLINE_APPROACHING,
        title,
        message,
        events.ENTITY_TASK,
        payload.task_id,
    )
    return directives


def _task_blocked(payload: TaskPayload, roles: RoleSets) -> list[RecipientDirective]:
    return _notify(
        [payload.team_lead_id, *roles.admins],
        events.TASK_BLOCKED,
        "Task Blocked",
        f"Task {payload.task_title} has been blocked.",
        events.ENTITY_TASK,
        payload.task_id,
    )


def _task_status_changed(payload: TaskPayload, roles: RoleSets) -> list[RecipientDirective]:
    actor = _actor(payload)
    directives = _notify(
        payload.assignees,
        events.TASK_STATUS_CHANGED,
        "Task Status Changed",
        f"Task {payload.task_title} status changed to {payload.new_status} by {actor}.",
        events.ENTITY_TASK,
        payload.task_id,
    )
    if payload.new_status in REVIEW_OR_DONE_STATUSES:
        friendly = "under review" if payload.new_status in UNDER_REVIEW_STATUSES else "done"
        message = (
            f"Task {payload.task_title} (assigned to {payload.assignee_names or 'Unassigned'}) "
            f"was marked as {friendly} by {actor}."
        )
        directives += _notify(
            [*roles.privileged, payload.team_lead_id],
            events.TASK_STATUS_CHANGED,
            "Task Status Updated",
            message,
            events.ENTITY_TASK,
            payload.task_id,
        )
    return directives


def _review_requested(event_type: str) -> Resolver:
    def resolve(payload: TaskPayload, roles: RoleSets) -> list[RecipientDirective]:
        actor = _actor(payload, "Someone")
        directives = _notify(
            [payload.team_lead_id],
            event_type,
            "Submission Pending Review",
            f"{actor} requested a review for task {payload.task_title}.",
            events.ENTITY_TASK,
            payload.task_id,
        )
        directives += _notify(
            roles.privileged,
            event_type,
            "Task in Review",
            f"{actor} submitted task {payload.task_title} for review.",
            events.ENTITY_TASK,
            payload.task_id,
        )
        return directives

    return resolve


def _submission_approved(payload: SubmissionPayload, roles: RoleSets) -> list[RecipientDirective]:
    verified = (
        f"Task {payload.task_title} was completed by {payload.submitter_name} "
        f"and verified by {payload.reviewer_name}."
    )
    directives = _notify(
        [*roles.privileged, payload.team_lead_id],
        events.SUBMISSION_APPROVED,
        "Task Reviewed and Verified",
        verified,
        events.ENTITY_TASK,
        payload.task_id,
    )
    directives += _notify(
        [payload.submitter_id],
        events.SUBMISSION_APPROVED,
        "Submission Approved",
        f"Your submission for task {payload.task_title} was approved.",
        events.ENTITY_TASK,
        payload.task_id,
    )
    return directives


def _submission_rejected(payload: SubmissionPayload, roles: RoleSets) -> list[RecipientDirective]:
    return _notify(
        [payload.submitter_id],
        events.SUBMISSION_REJECTED,
        "Submission Sent Back",
        f"Your submission for task {payload.task_title} was sent back. Please revise.",
        events.ENTITY_TASK,
        payload.task_id,
    )


def _system_setting_changed(payload: EventPayload, roles: RoleSets) -> list[RecipientDirective]:
    return _notify(
        roles.super_admins,
        events.SYSTEM_SETTING_CHANGED,
        "System Setting Changed",
        f"System settings were updated by {_actor(payload)}.",
        events.ENTITY_SYSTEM,
        None,
    )


def _new_admin_created(payload: AdminCreatedPayload, roles: RoleSets) -> list[RecipientDirective]:
    return _notify(
        roles.super_admins,
        events.NEW_ADMIN_CREATED,
        "New Admin Created",
        f"A new admin user {payload.admin_name} was created.",
        events.ENTITY_USER,
        payload.admin_id,
    )


def _escalation(payload: TaskPayload, roles: RoleSets) -> list[RecipientDirective]:
    return _notify(
        roles.super_admins,
        events.ESCALATION,
        "Escalation",
        f"An escalation was raised for task {payload.task_title}.",
        events.ENTITY_TASK,
        payload.task_id,
    )


ROUTING_TABLE: Mapping[str, RoutingRule] = MappingProxyType(
    {
        events.TEAM_CREATED: RoutingRule(TeamPayload, _team_created),
        events.PROJECT_CREATED: RoutingRule(ProjectPayload, _project_created),
        events.MENTIONED: RoutingRule(MentionPayload, _mentioned),
        events.TASK_ASSIGNED: RoutingRule(TaskPayload, _task_assigned),
        events.CRITICAL_TASK_ASSIGNED: RoutingRule(TaskPayload, _critical_task_assigned),
        events.DEADLINE_APPROACHING: RoutingRule(TaskPayload, _deadline_approaching),
        events.TASK_BLOCKED: RoutingRule(TaskPayload, _task_blocked),
        events.TASK_STATUS_CHANGED: RoutingRule(TaskPayload, _task_status_changed),
        events.TASK_SUBMITTED: RoutingRule(TaskPayload, _review_requested(events.TASK_SUBMITTED)),
        events.REVIEW_REQUESTED: RoutingRule(
            TaskPayload, _review_requested(events.REVIEW_REQUESTED)
        ),
        events.SUBMISSION_APPROVED: RoutingRule(SubmissionPayload, _submission_approved),
        events.SUBMISSION_REJECTED: RoutingRule(SubmissionPayload, _submission_rejected),
        events.SYSTEM_SETTING_CHANGED: RoutingRule(EventPayload, _system_setting_changed),
        events.NEW_ADMIN_CREATED: RoutingRule(AdminCreatedPayload, _new_admin_created),
        events.ESCALATION: RoutingRule(TaskPayload, _escalation),
    }
)


def resolve_recipients(
    event_type: str,
    payload: Mapping[str, Any] | None,
    role_sets: RoleSets,
    *,
    routing_table: Mapping[str, RoutingRule] = ROUTING_TABLE,
) -> list[RecipientDirective]:
    """Return the raw directives for an event; unknown types resolve to none.

    Raises :class:`pydantic.ValidationError` when ``payload`` does not match
    the model registered for ``event_type``.
    """

    rule = routing_table.get(event_type)
    if rule is None:
        return []
    parsed = rule.payload_model.model_validate(dict(payload or {}))
    return rule.resolve(parsed, role_sets)


def select_recipients(
    directives: Iterable[RecipientDirective], *, actor_id: int | None
) -> list[RecipientDirective]:
    """Keep the first directive per user and drop the acting user."""

    selected: list[RecipientDirective] = []
    seen: set[int] = set()
    for directive in directives:
        if directive.user_id in seen:
            continue
        if actor_id is not None and directive.user_id == actor_id:
            continue
        seen.add(directive.user_id)
        selected.append(directive)
    return selected


__all__ = [
    "RecipientDirective",
    "RoutingRule",
    "ROUTING_TABLE",
    "REVIEW_OR_DONE_STATUSES",
    "resolve_recipients",
    "select_recipients",
]
