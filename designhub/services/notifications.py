"""In-app notifications: staging new ones and the current user's inbox operations."""

import math

from sqlalchemy import func
from sqlalchemy.orm import Session

from designhub.core.errors import ValidationError
from designhub.models import Notification, NotificationType
from designhub.schemas.user import (
    NotificationActionRequest,
    NotificationActionResponse,
    NotificationItem,
    NotificationsResponse,
)


def notify(
    db: Session,
    user_id: int,
    notification_type: NotificationType,
    title: str,
    message: str,
    link: str | None = None,
) -> None:
    """Stage a notification in the caller's transaction; the caller commits."""
    db.add(
        Notification(
            user_id=user_id,
            type=notification_type.value,
            title=title,
            message=message,
            link=link,
        )
    )


def list_notifications(
    db: Session,
    user_id: int,
    *,
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
) -> NotificationsResponse:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))

    total = query.count()
    rows = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    unread_count = (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .scalar()
    )
    return NotificationsResponse(
        notifications=[NotificationItem.model_validate(n) for n in rows],
        total=total,
        unread_count=unread_count or 0,
        page=page,
        total_pages=math.ceil(total / limit),
    )


def apply_notification_action(
    db: Session, user_id: int, body: NotificationActionRequest
) -> NotificationActionResponse:
    """Mark read or delete the caller's notifications; other users' rows are never touched."""
    own = db.query(Notification).filter(Notification.user_id == user_id)

    if body.action == "mark-read" and body.notification_id:
        updated = own.filter(Notification.id == body.notification_id).update(
            {Notification.read: True}, synchronize_session=False
        )
        db.commit()
        return NotificationActionResponse(updated=updated)

    if body.action == "mark-all-read":
        updated = own.filter(Notification.read.is_(False)).update(
            {Notification.read: True}, synchronize_session=False
        )
        db.commit()
        return NotificationActionResponse(updated=updated)

    if body.action == "delete" and body.notification_id:
        own.filter(Notification.id == body.notification_id).delete(synchronize_session=False)
        db.commit()
        return NotificationActionResponse()

    if body.action == "delete-all-read":
        deleted = own.filter(Notification.read.is_(True)).delete(synchronize_session=False)
        db.commit()
        return NotificationActionResponse(deleted=deleted)

    raise ValidationError("Invalid action")
