import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from app.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Model for users table, the application identity
    Example:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "email": "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed@wallet.temp",
        "created_at": "2024-01-01T12:00:00",
        "last_active_at": "2024-01-01T12:00:00"
    }
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), nullable=True, unique=True)
    password_hash = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    last_active_at = Column(DateTime(timezone=True), default=_now, nullable=False)


class UserProfile(Base):
    """Public profile attached to a user"""

    __tablename__ = "user_profiles"

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    email = Column(String(320), nullable=True)
    public_username = Column(String(64), nullable=False, unique=True)
    bio = Column(Text, nullable=True, default="")
    profile_image_url = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="ACTIVE")
    role = Column(String(16), nullable=False, default="USER")
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now, nullable=False)
