"""
Feed and Dashboard API Router

Landing payloads: the athlete feed (school suggestions + recent activity) and
a role-specific dashboard summary.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional

from core.auth import Viewer, get_viewer, require_athlete
from core.database import get_db
from models import AthleteSchoolInterest, ContactRequest, SavedAthlete
from routers.notifications import to_response
from schemas import NotificationResponse, SchoolResponse
from services import notification_service, school_service
from services.search_service import interested_athlete_ids

router = APIRouter(prefix="/v1", tags=["Feed"])

FEED_NOTIFICATIONS_LIMIT = 10


class FeedResponse(BaseModel):
    suggested_schools: List[SchoolResponse]
    notifications: List[NotificationResponse]


class DashboardResponse(BaseModel):
    role: str
    has_profile: bool
    unread_notifications: int
    # athlete
    completeness_score: Optional[int] = None
    interests_count: Optional[int] = None
    pending_contact_requests: Optional[int] = None
    # coach
    verification_status: Optional[str] = None
    shortlist_count: Optional[int] = None
    interested_count: Optional[int] = None


@router.get("/feed", response_model=FeedResponse)
def athlete_feed(viewer: Viewer = Depends(require_athlete), db: Session = Depends(get_db)):
    notifications = notification_service.list_notifications(db, viewer.id, limit=FEED_NOTIFICATIONS_LIMIT)
    return FeedResponse(
        suggested_schools=school_service.suggested_schools(db, viewer.id),
        notifications=[to_response(n) for n in notifications],
    )


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(viewer: Viewer = Depends(get_viewer), db: Session = Depends(get_db)):
    response = DashboardResponse(
        role=viewer.role,
        has_profile=bool(viewer.athlete_profile or viewer.coach_profile),
        unread_notifications=notification_service.unread_count(db, viewer.id),
    )

    if viewer.is_athlete:
        profile = viewer.athlete_profile
        response.completeness_score = profile.completeness_score if profile else 0
        response.interests_count = (
            db.query(func.count(AthleteSchoolInterest.id))
            .filter(AthleteSchoolInterest.athlete_user_id == viewer.id)
            .scalar()
        )
        response.pending_contact_requests = (
            db.query(func.count(ContactRequest.id))
            .filter(ContactRequest.athlete_user_id == viewer.id, ContactRequest.status == "pending")
            .scalar()
        )
    elif viewer.is_coach and viewer.coach_profile:
        response.verification_status = viewer.coach_profile.verification_status
        response.shortlist_count = (
            db.query(func.count(SavedAthlete.id))
            .filter(SavedAthlete.coach_user_id == viewer.id)
            .scalar()
        )
        school_id = viewer.coach_profile.school_id
        if viewer.is_verified_coach and school_id:
            response.interested_count = len(interested_athlete_ids(db, school_id))
    return response
