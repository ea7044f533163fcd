"""Timestamp helpers for the queue and inbox tables.

Entities carry timezone-aware datetimes. The database columns are naive and
hold wall-clock time in the configured ``APP_TIMEZONE``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskhub.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured timezone, or UTC when it cannot be resolved."""

    tz_name = (get_settings().app_timezone or "").strip()
    if not tz_name or tz_name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown APP_TIMEZONE %r, using UTC", tz_name)
        return timezone.utc


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Column default for ``created_at``."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Attach or convert ``value`` to the app timezone.

    Naive values are assumed to already be app wall-clock time, which is how
    they are stored.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None
