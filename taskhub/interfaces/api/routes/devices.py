"""Routes for registering the authenticated user's push devices."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from taskhub.application.use_cases.notifications import (
    register_device_token as register_device_token_uc,
    unregister_device_token as unregister_device_token_uc,
)
from taskhub.domain.entities import User
from taskhub.infrastructure.database import get_db
from taskhub.interfaces.api.dependencies import get_current_active_user
from taskhub.interfaces.api.schemas import DeviceTokenRequest, DeviceTokensRead

router = APIRouter(prefix="/users/me/fcm-tokens", tags=["devices"])


@router.post("/", response_model=DeviceTokensRead, status_code=status.HTTP_201_CREATED)
def register_device_token(
    token_in: DeviceTokenRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DeviceTokensRead:
    """Register a device token for push delivery."""

    try:
        tokens = register_device_token_uc(db, current_user.id, token_in.token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return DeviceTokensRead(tokens=tokens)


@router.delete("/", response_model=DeviceTokensRead)
def unregister_device_token(
    token_in: DeviceTokenRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DeviceTokensRead:
    """Forget a device token, typically on logout."""

    try:
        tokens = unregister_device_token_uc(db, current_user.id, token_in.token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return DeviceTokensRead(tokens=tokens)


__all__ = ["router"]
