"""Push transport adapters."""

from .fcm import (
    FCMGateway,
    INVALID_TOKEN_CODE,
    PushConfigurationError,
    PushSendResult,
    UNREGISTERED_TOKEN_CODE,
    error_code,
    get_firebase_app,
    stringify_data,
)

__all__ = [
    "FCMGateway",
    "PushConfigurationError",
    "PushSendResult",
    "get_firebase_app",
    "stringify_data",
    "error_code",
    "INVALID_TOKEN_CODE",
    "UNREGISTERED_TOKEN_CODE",
]
