"""
Notifications API Router
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List
from uuid import UUID

from core.auth import get_current_user
from core.database import get_db
from models import Notification, User
from schemas import NotificationResponse
from services import notification_service

router = APIRouter(prefix="/v1/notifications", tags=["Notifications"])


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int


def to_response(notification: Notification) -> NotificationResponse:
    response = NotificationResponse.model_validate(notification)
    response.target_route = notification_service.target_route(notification)
    return response


@router.get("", response_model=NotificationListResponse)
def list_notifications(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Newest 50."""
    items = notification_service.list_notifications(db, current_user.id)
    return NotificationListResponse(
        notifications=[to_response(n) for n in items],
        unread_count=notification_service.unread_count(db, current_user.id),
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_read(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, current_user.id)
    db.commit()
    return MarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Idempotent; a second call leaves read_at as it was."""
    notification = notification_service.mark_read(db, current_user.id, notification_id)
    db.commit()
    return to_response(notification)
