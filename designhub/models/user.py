"""ORM models for accounts and persisted refresh tokens."""

from enum import StrEnum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from designhub.models.base import Base, utcnow


class Role(StrEnum):
    """Permission tier stored on users and embedded in access tokens."""

    CLIENT = "CLIENT"
    ENGINEER = "ENGINEER"
    ADMIN = "ADMIN"


class User(Base):
    """
    Account used for JWT authentication and role-based access control.

    Created on registration, mutated on profile update, never hard-deleted.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.CLIENT.value)
    avatar_url = Column(String(2048), nullable=True)
    bio = Column(Text, nullable=True)
    portfolio = Column(String(2048), nullable=True)
    phone = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class RefreshToken(Base):
    """
    Long-lived credential exchanged for new access tokens.

    A user may hold several at once (one per session). Rows past expires_at are
    deleted when presented; there is no background sweep.
    """

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(1024), nullable=False, unique=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    user = relationship("User", back_populates="refresh_tokens")
