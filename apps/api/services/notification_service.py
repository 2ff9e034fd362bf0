"""
Notification Service

In-app notifications: creation (optionally mirrored to email through the
worker), listing, and read tracking.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import NotFoundError
from models import Notification, User

logger = logging.getLogger(__name__)

NOTIFICATION_LIST_LIMIT = 50

# Where the UI sends the user when a notification is clicked.
TARGET_ROUTES = {
    "MESSAGE": "/messages",
    "CONTACT_REQUEST": "/profile?tab=requests",
    "CONTACT_RESPONSE": "/messages",
    "VERIFICATION": "/profile",
}


def target_route(notification: Notification) -> Optional[str]:
    return TARGET_ROUTES.get(notification.type)


def create_notification(
    db: Session,
    user_id: UUID,
    type: str,
    title: str,
    body: Optional[str] = None,
    related_id: Optional[UUID] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        body=body,
        related_id=related_id,
    )
    db.add(notification)
    db.flush()

    if settings.EMAIL_ENABLED:
        _enqueue_email(db, notification)
    return notification


def _enqueue_email(db: Session, notification: Notification) -> None:
    user = db.get(User, notification.user_id)
    if not user:
        return
    try:
        from tasks.email_tasks import send_notification_email_task
        send_notification_email_task.delay(
            user.email, notification.title, notification.body, target_route(notification)
        )
    except Exception as e:
        # Broker down: the in-app notification still exists.
        logger.warning(f"Could not enqueue notification email for {notification.id}: {e}")


def list_notifications(db: Session, user_id: UUID, limit: int = NOTIFICATION_LIST_LIMIT) -> List[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def unread_count(db: Session, user_id: UUID) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
        .scalar()
    ) or 0


def mark_read(db: Session, user_id: UUID, notification_id: UUID) -> Notification:
    """Mark one notification read. Already-read notifications keep their read_at."""
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notification", str(notification_id))
    if notification.read_at is None:
        notification.read_at = datetime.now(timezone.utc)
        db.flush()
    return notification


def mark_all_read(db: Session, user_id: UUID) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
        .update({Notification.read_at: datetime.now(timezone.utc)})
    )
    db.flush()
    return updated
