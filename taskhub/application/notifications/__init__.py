"""Notification fan-out and push delivery engines."""

from .dispatcher import NotificationDispatcher
from .guard import CycleGuard
from .push_dispatcher import PushDispatcher, PushGateway, parse_push_data
from .roles import (
    DatabasePrivilegedUsersProvider,
    PrivilegedUsersProvider,
    RoleSets,
    StaticPrivilegedUsersProvider,
)
from .routing import (
    REVIEW_OR_DONE_STATUSES,
    ROUTING_TABLE,
    RecipientDirective,
    RoutingRule,
    resolve_recipients,
    select_recipients,
)

__all__ = [
    "NotificationDispatcher",
    "PushDispatcher",
    "PushGateway",
    "parse_push_data",
    "CycleGuard",
    "RoleSets",
    "PrivilegedUsersProvider",
    "DatabasePrivilegedUsersProvider",
    "StaticPrivilegedUsersProvider",
    "RecipientDirective",
    "RoutingRule",
    "ROUTING_TABLE",
    "REVIEW_OR_DONE_STATUSES",
    "resolve_recipients",
    "select_recipients",
]
