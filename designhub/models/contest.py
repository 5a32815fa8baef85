"""ORM models for design contests and the proposals submitted against them."""

from enum import StrEnum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from designhub.models.base import Base, utcnow


class ContestStatus(StrEnum):
    OPEN = "OPEN"
    EVALUATING = "EVALUATING"
    CLOSED = "CLOSED"


class Contest(Base):
    """Design brief launched by a client; architects submit proposals while OPEN."""

    __tablename__ = "contests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    brief = Column(Text, nullable=True)
    location = Column(String(255), nullable=False)
    category = Column(String(64), nullable=False, index=True)
    budget = Column(Float, nullable=False)
    deadline = Column(DateTime(timezone=True), nullable=False)
    status = Column(
        String(32), nullable=False, default=ContestStatus.OPEN.value, index=True
    )
    image_url = Column(String(2048), nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    must_haves = Column(JSON, nullable=False, default=list)
    constraints = Column(JSON, nullable=False, default=list)
    deliverables = Column(JSON, nullable=False, default=list)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    client = relationship("User")
    proposals = relationship(
        "Proposal",
        back_populates="contest",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Proposal(Base):
    """An architect's submission against an open contest (one per architect per contest)."""

    __tablename__ = "proposals"
    __table_args__ = (
        UniqueConstraint("contest_id", "architect_id", name="uq_proposals_contest_architect"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    contest_id = Column(
        Integer, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    architect_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="SUBMITTED")
    submitted_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    contest = relationship("Contest", back_populates="proposals")
    architect = relationship("User")
    files = relationship("File", foreign_keys="File.proposal_id", order_by="File.id")
