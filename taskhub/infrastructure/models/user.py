"""SQLAlchemy model for the user table."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, func

from taskhub.infrastructure.database import Base


class UserModel(Base):
    """Database representation of the system user."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    role = Column(String(30), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # JSON array of device tokens; legacy rows hold a JSON-encoded string.
    fcm_tokens = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["UserModel"]
