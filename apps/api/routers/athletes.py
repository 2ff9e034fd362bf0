"""
Athletes API Router

Athlete detail pages and the verified coach's "interested in my school" list.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from core.auth import Viewer, get_viewer, require_verified_coach
from core.database import get_db
from core.exceptions import NotFoundError
from models import AthleteProfile, AthleteSchoolInterest, COACH_VISIBLE_INTEREST_VISIBILITIES
from schemas import (
    AthleteCard,
    AthleteProfileResponse,
    HighlightResponse,
    InterestType,
    StatResponse,
    VisibleInterest,
)
from services import profile_service
from services.school_service import visible_interests_by_athlete
from services.search_service import build_cards, saved_athlete_ids

router = APIRouter(prefix="/v1/athletes", tags=["Athletes"])


class InterestedAthlete(BaseModel):
    interest_type: InterestType
    interested_at: datetime
    athlete: AthleteCard


class AthleteDetailResponse(BaseModel):
    profile: AthleteProfileResponse
    highlights: List[HighlightResponse] = []
    stats: List[StatResponse] = []
    interests: List[VisibleInterest] = []
    saved: bool = False
    is_own_profile: bool = False


@router.get("/interested", response_model=List[InterestedAthlete])
def interested_athletes(
    viewer: Viewer = Depends(require_verified_coach),
    db: Session = Depends(get_db),
):
    """Public athletes with a coach-visible interest in this coach's school, newest first."""
    school_id = viewer.coach_profile.school_id
    if school_id is None:
        return []

    rows = (
        db.query(AthleteSchoolInterest, AthleteProfile)
        .join(AthleteProfile, AthleteProfile.user_id == AthleteSchoolInterest.athlete_user_id)
        .filter(
            AthleteSchoolInterest.school_id == school_id,
            AthleteSchoolInterest.visibility.in_(COACH_VISIBLE_INTEREST_VISIBILITIES),
            AthleteProfile.is_public.is_(True),
        )
        .order_by(AthleteSchoolInterest.created_at.desc())
        .all()
    )
    cards = build_cards(db, viewer, [profile for _, profile in rows])
    return [
        InterestedAthlete(
            interest_type=interest.interest_type or "LIKE",
            interested_at=interest.created_at,
            athlete=card,
        )
        for (interest, _), card in zip(rows, cards)
    ]


@router.get("/{user_id}", response_model=AthleteDetailResponse)
def athlete_detail(
    user_id: UUID,
    viewer: Viewer = Depends(get_viewer),
    db: Session = Depends(get_db),
):
    profile: Optional[AthleteProfile] = db.get(AthleteProfile, user_id)
    is_own = viewer.id == user_id
    if profile is None or not (profile.is_public or is_own or viewer.role == "admin"):
        raise NotFoundError("Athlete", str(user_id))

    response = AthleteDetailResponse(
        profile=AthleteProfileResponse.model_validate(profile),
        highlights=[HighlightResponse.model_validate(h) for h in profile_service.list_highlights(db, user_id)],
        stats=[StatResponse.model_validate(s) for s in profile_service.list_stats(db, user_id)],
        is_own_profile=is_own,
    )

    if viewer.is_verified_coach:
        my_school_id = viewer.coach_profile.school_id
        response.interests = visible_interests_by_athlete(db, [user_id], my_school_id)[user_id]
        response.saved = user_id in saved_athlete_ids(db, viewer.id)
    return response
