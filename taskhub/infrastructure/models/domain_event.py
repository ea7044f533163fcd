"""SQLAlchemy model for the domain event queue."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import expression

from taskhub.infrastructure.database import Base
from taskhub.utils import now_in_app_naive_datetime


class DomainEventModel(Base):
    """Append-only queue row written by event producers."""

    __tablename__ = "notification_queue"
    __table_args__ = (Index("ix_notification_queue_pending", "processed", "created_at"),)

    id = Column(Integer, primary_key=True, index=True)
    event_type = Column(String(50), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    processed = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    attempts = Column(Integer, nullable=False, default=0, server_default="0")
    error_log = Column(Text, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["DomainEventModel"]
