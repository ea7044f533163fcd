"""Endpoints for the notification inbox and delivery preferences."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from taskhub.application.use_cases.notifications import (
    DEFAULT_INBOX_LIMIT,
    count_unread_notifications as count_unread_uc,
    delete_notification as delete_notification_uc,
    get_user_notifications as get_user_notifications_uc,
    list_preferences as list_preferences_uc,
    mark_all_as_read as mark_all_as_read_uc,
    mark_as_read as mark_as_read_uc,
    update_preference as update_preference_uc,
)
from taskhub.domain.entities import User
from taskhub.infrastructure.database import get_db
from taskhub.interfaces.api.dependencies import get_current_active_user
from taskhub.interfaces.api.schemas import (
    MarkAllReadResponse,
    NotificationPreferenceRead,
    NotificationPreferenceUpdate,
    NotificationRead,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    limit: int = Query(DEFAULT_INBOX_LIMIT, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated user."""

    notifications = get_user_notifications_uc(db, current_user.id, limit=limit)
    return [NotificationRead.model_validate(notification) for notification in notifications]


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UnreadCountRead:
    return UnreadCountRead(unread=count_unread_uc(db, current_user.id))


@router.put("/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MarkAllReadResponse:
    """Mark every unread notification of the authenticated user as read."""

    return MarkAllReadResponse(updated=mark_all_as_read_uc(db, current_user.id))


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    """Mark one of the authenticated user's notifications as read."""

    try:
        notification = mark_as_read_uc(db, notification_id, current_user.id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NotificationRead.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    try:
        delete_notification_uc(db, notification_id, current_user.id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/preferences", response_model=list[NotificationPreferenceRead])
def list_preferences(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationPreferenceRead]:
    """Return the stored preferences; missing event types are fully enabled."""

    preferences = list_preferences_uc(db, current_user.id)
    return [NotificationPreferenceRead.model_validate(preference) for preference in preferences]


@router.put("/preferences", response_model=NotificationPreferenceRead)
def update_preference(
    preference_in: NotificationPreferenceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationPreferenceRead:
    try:
        preference = update_preference_uc(
            db,
            current_user.id,
            event_type=preference_in.event_type,
            in_app=preference_in.in_app,
            push=preference_in.push,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return NotificationPreferenceRead.model_validate(preference)


__all__ = ["router"]
