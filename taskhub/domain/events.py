"""Domain event tags and the payload shape each event type carries.

Producers enqueue a free-form JSON payload; the dispatcher validates it
against the model registered for the event type before resolving
recipients. Every payload shares the :class:`EventPayload` envelope.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

TEAM_CREATED = "TEAM_CREATED"
TEAM_LEAD_ASSIGNED = "TEAM_LEAD_ASSIGNED"
PROJECT_CREATED = "PROJECT_CREATED"
MENTIONED = "MENTIONED"
TASK_ASSIGNED = "TASK_ASSIGNED"
CRITICAL_TASK_ASSIGNED = "CRITICAL_TASK_ASSIGNED"
DEADLINE_APPROACHING = "DEADLINE_APPROACHING"
TASK_BLOCKED = "TASK_BLOCKED"
TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"
TASK_SUBMITTED = "TASK_SUBMITTED"
REVIEW_REQUESTED = "REVIEW_REQUESTED"
SUBMISSION_APPROVED = "SUBMISSION_APPROVED"
SUBMISSION_REJECTED = "SUBMISSION_REJECTED"
SYSTEM_SETTING_CHANGED = "SYSTEM_SETTING_CHANGED"
NEW_ADMIN_CREATED = "NEW_ADMIN_CREATED"
ESCALATION = "ESCALATION"

ENTITY_TEAM = "TEAM"
ENTITY_PROJECT = "PROJECT"
ENTITY_TASK = "TASK"
ENTITY_USER = "USER"
ENTITY_SYSTEM = "SYSTEM"


def _none_as_empty_list(value: Any) -> Any:
    return [] if value is None else value


def _join_names(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if item)
    return value


UserIdList = Annotated[list[int], BeforeValidator(_none_as_empty_list)]
NameList = Annotated[str | None, BeforeValidator(_join_names)]


class EventPayload(BaseModel):
    """Envelope fields shared by every event payload."""

    model_config = ConfigDict(extra="ignore")

    actor_id: int | None = None
    actor_name: str | None = None
    entity_type: str | None = None
    entity_id: int | None = None


class TeamPayload(EventPayload):
    team_id: int | None = None
    team_name: str | None = None
    lead_id: int | None = None


class ProjectPayload(EventPayload):
    project_id: int | None = None
    project_name: str | None = None


class MentionPayload(EventPayload):
    mentioned_users: UserIdList = Field(default_factory=list)


class TaskPayload(EventPayload):
    task_id: int | None = None
    task_title: str | None = None
    assignees: UserIdList = Field(default_factory=list)
    assignee_names: NameList = None
    team_lead_id: int | None = None
    new_status: str | None = None


class SubmissionPayload(TaskPayload):
    submitter_id: int | None = None
    submitter_name: str | None = None
    reviewer_name: str | None = None


class AdminCreatedPayload(EventPayload):
    admin_id: int | None = None
    admin_name: str | None = None


__all__ = [
    "EventPayload",
    "TeamPayload",
    "ProjectPayload",
    "MentionPayload",
    "TaskPayload",
    "SubmissionPayload",
    "AdminCreatedPayload",
    "TEAM_CREATED",
    "TEAM_LEAD_ASSIGNED",
    "PROJECT_CREATED",
    "MENTIONED",
    "TASK_ASSIGNED",
    "CRITICAL_TASK_ASSIGNED",
    "DEADLINE_APPROACHING",
    "TASK_BLOCKED",
    "TASK_STATUS_CHANGED",
    "TASK_SUBMITTED",
    "REVIEW_REQUESTED",
    "SUBMISSION_APPROVED",
    "SUBMISSION_REJECTED",
    "SYSTEM_SETTING_CHANGED",
    "NEW_ADMIN_CREATED",
    "ESCALATION",
    "ENTITY_TEAM",
    "ENTITY_PROJECT",
    "ENTITY_TASK",
    "ENTITY_USER",
    "ENTITY_SYSTEM",
]
