"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when stamping and reading stored datetimes",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    workers_enabled: bool = Field(
        default=True,
        description="Start the notification and push polling loops with the app",
    )
    notification_poll_interval_ms: int = Field(
        default=10_000,
        description="Milliseconds between notification dispatcher cycles",
        gt=0,
    )
    push_poll_interval_ms: int = Field(
        default=5_000,
        description="Milliseconds between push dispatcher cycles",
        gt=0,
    )
    event_batch_size: int = Field(
        default=50, description="Domain events fetched per cycle", gt=0
    )
    push_batch_size: int = Field(
        default=50, description="Push queue entries fetched per cycle", gt=0
    )
    max_push_attempts: int = Field(
        default=3, description="Send attempts before a push entry is FAILED", gt=0
    )
    max_event_attempts: int = Field(
        default=5,
        description="Failed fan-out attempts before a domain event is retired",
        gt=0,
    )
    push_on_notification: bool = Field(
        default=True,
        description="Enqueue a push delivery for every in-app notification created",
    )

    firebase_credentials_path: str | None = Field(
        default=None,
        description="Path to the Firebase service-account JSON used for FCM",
    )
    push_send_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout applied to every FCM request",
        gt=0,
    )
    push_default_link: str = Field(
        default="/dashboard",
        description="Link opened from a web push when the payload has no url",
    )

    @model_validator(mode="after")
    def _validate_log_level(self) -> "Settings":
        normalized = self.log_level.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"LOG_LEVEL '{self.log_level}' is not a valid logging level")
        self.log_level = normalized
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
