"""SQLAlchemy ORM models."""

from designhub.models.base import Base
from designhub.models.contest import Contest, ContestStatus, Proposal
from designhub.models.file import File
from designhub.models.notification import Notification, NotificationType
from designhub.models.practice import PracticeRequest, PracticeStatus
from designhub.models.user import RefreshToken, Role, User

__all__ = [
    "Base",
    "Contest",
    "ContestStatus",
    "File",
    "Notification",
    "NotificationType",
    "PracticeRequest",
    "PracticeStatus",
    "Proposal",
    "RefreshToken",
    "Role",
    "User",
]
