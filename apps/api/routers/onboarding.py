"""
Onboarding API Router

First-run profile creation for each role. Both endpoints are upserts so a
user can re-run onboarding.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID

from core.auth import Viewer, require_athlete, require_coach
from core.database import get_db
from schemas import AthleteProfileFields, AthleteProfileResponse, CoachProfileResponse
from services.profile_service import onboard_coach, upsert_athlete_profile

router = APIRouter(prefix="/v1/onboarding", tags=["Onboarding"])


class AthleteOnboardingRequest(AthleteProfileFields):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    sport: str = Field(min_length=1, max_length=100)


class CoachOnboardingRequest(BaseModel):
    school: str = Field(min_length=1, max_length=200)
    school_id: Optional[UUID] = None
    title: str = Field(min_length=1, max_length=200)
    sports: List[str] = []
    looking_for: Optional[str] = Field(default=None, max_length=2000)


@router.post("/athlete", response_model=AthleteProfileResponse)
def onboard_athlete(
    request: AthleteOnboardingRequest,
    viewer: Viewer = Depends(require_athlete),
    db: Session = Depends(get_db),
):
    profile = upsert_athlete_profile(db, viewer.user, request.model_dump(exclude_unset=True))
    db.commit()
    return profile


@router.post("/coach", response_model=CoachProfileResponse)
def onboard_coach_profile(
    request: CoachOnboardingRequest,
    viewer: Viewer = Depends(require_coach),
    db: Session = Depends(get_db),
):
    """Submitting (or resubmitting) puts the profile back into pending review."""
    profile = onboard_coach(db, viewer.user, request.model_dump())
    db.commit()
    return profile
