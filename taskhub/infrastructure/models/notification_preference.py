"""SQLAlchemy model for per-event notification preferences."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.sql import expression

from taskhub.infrastructure.database import Base


class NotificationPreferenceModel(Base):
    """Channel opt-outs keyed by ``(user_id, event_type)``."""

    __tablename__ = "notification_preference"

    user_id = Column(Integer, ForeignKey("user.id"), primary_key=True)
    event_type = Column(String(50), primary_key=True)
    in_app = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    push = Column(Boolean, nullable=False, default=True, server_default=expression.true())


__all__ = ["NotificationPreferenceModel"]
