"""ORM model for uploaded file metadata (the bytes live in blob storage)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from designhub.models.base import Base, utcnow


class File(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(1024), nullable=False)
    original_name = Column(String(1024), nullable=False)
    mime_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    url = Column(String(2048), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    contest_id = Column(
        Integer, ForeignKey("contests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    proposal_id = Column(
        Integer, ForeignKey("proposals.id", ondelete="SET NULL"), nullable=True, index=True
    )
    practice_id = Column(
        Integer,
        ForeignKey("practice_requests.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
