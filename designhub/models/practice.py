"""ORM model for permit-practice requests claimable by engineers."""

from enum import StrEnum

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from designhub.models.base import Base, utcnow


class PracticeStatus(StrEnum):
    PENDING_QUOTE = "PENDING_QUOTE"
    QUOTE_SENT = "QUOTE_SENT"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class PracticeRequest(Base):
    """
    Permit-processing work item.

    user_id is the requester (null for anonymous submissions). engineer_id is set
    when an engineer claims the request and cleared again if the requester
    rejects that engineer's quote.

    PENDING_QUOTE -> QUOTE_SENT -> ACCEPTED -> IN_PROGRESS -> COMPLETED; a
    rejected quote goes back to PENDING_QUOTE.
    """

    __tablename__ = "practice_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(64), nullable=False)
    property_type = Column(String(128), nullable=False)
    size = Column(Float, nullable=True)
    location = Column(String(255), nullable=False)
    is_vincolato = Column(Boolean, nullable=False, default=False)
    has_old_permits = Column(Boolean, nullable=False, default=False)
    intervention_details = Column(Text, nullable=True)
    contact_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(64), nullable=True)
    status = Column(
        String(32), nullable=False, default=PracticeStatus.PENDING_QUOTE.value, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    engineer_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    quote_amount = Column(Float, nullable=True)
    quote_valid_until = Column(DateTime(timezone=True), nullable=True)
    quote_notes = Column(Text, nullable=True)
    progress_percent = Column(Integer, nullable=False, default=0, server_default="0")
    progress_notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    user = relationship("User", foreign_keys=[user_id])
    engineer = relationship("User", foreign_keys=[engineer_id])
    files = relationship("File", foreign_keys="File.practice_id", order_by="File.id")
