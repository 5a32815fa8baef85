"""ORM model for in-app notifications."""

from enum import StrEnum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from designhub.models.base import Base, utcnow


class NotificationType(StrEnum):
    CONTEST_NEW_PROPOSAL = "CONTEST_NEW_PROPOSAL"
    PRACTICE_CLAIMED = "PRACTICE_CLAIMED"
    PRACTICE_QUOTE = "PRACTICE_QUOTE"
    PRACTICE_UPDATE = "PRACTICE_UPDATE"
    PRACTICE_COMPLETED = "PRACTICE_COMPLETED"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(1024), nullable=True)
    read = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
