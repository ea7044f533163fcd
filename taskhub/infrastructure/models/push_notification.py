"""SQLAlchemy model for the push delivery queue."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text

from taskhub.domain.entities import PUSH_STATUS_PENDING
from taskhub.infrastructure.database import Base
from taskhub.utils import now_in_app_naive_datetime


class PushNotificationModel(Base):
    """Per-user push request tracked through PENDING, SENT and FAILED."""

    __tablename__ = "push_notification_queue"
    __table_args__ = (
        Index("ix_push_notification_queue_pending", "status", "attempts", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    title = Column(String(120), nullable=False)
    body = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    status = Column(String(10), nullable=False, default=PUSH_STATUS_PENDING)
    attempts = Column(Integer, nullable=False, default=0, server_default="0")
    error_log = Column(Text, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["PushNotificationModel"]
