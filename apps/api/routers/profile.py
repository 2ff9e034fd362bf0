"""
Profile API Router

The signed-in user's own profile: athlete fields, highlights, stats and
received contact requests; coach fields and camps. A user without a profile
gets an empty payload pointing at onboarding, not a 404.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID

from core.auth import Viewer, get_viewer, require_athlete, require_coach
from core.database import get_db
from core.exceptions import NotFoundError
from schemas import (
    AthleteProfileFields,
    AthleteProfileResponse,
    CampFields,
    CampResponse,
    CoachProfileResponse,
    ContactRequestResponse,
    HighlightResponse,
    StatResponse,
    StatSourceTypeName,
)
from services import profile_service
from services.account_service import onboarding_route
from services.contact_service import list_contact_requests

router = APIRouter(prefix="/v1/profile", tags=["Profile"])


class ProfileResponse(BaseModel):
    role: str
    has_profile: bool
    onboarding_route: Optional[str] = None
    athlete_profile: Optional[AthleteProfileResponse] = None
    coach_profile: Optional[CoachProfileResponse] = None
    highlights: List[HighlightResponse] = []
    stats: List[StatResponse] = []
    contact_requests: List[ContactRequestResponse] = []


class CoachProfileUpdate(BaseModel):
    school: Optional[str] = Field(default=None, min_length=1, max_length=200)
    school_id: Optional[UUID] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    sports: Optional[List[str]] = None
    looking_for: Optional[str] = Field(default=None, max_length=2000)


class HighlightCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    url: str = Field(min_length=1, max_length=500)


class StatCreate(BaseModel):
    season: str = Field(min_length=1, max_length=20)
    stat_key: str = Field(min_length=1, max_length=100)
    stat_value: str = Field(min_length=1, max_length=100)
    source_type: StatSourceTypeName = "self_reported"
    source_url: Optional[str] = Field(default=None, max_length=500)
    provider: Optional[str] = None


@router.get("", response_model=ProfileResponse)
def get_profile(viewer: Viewer = Depends(get_viewer), db: Session = Depends(get_db)):
    response = ProfileResponse(role=viewer.role, has_profile=False)

    if viewer.is_athlete and viewer.athlete_profile:
        response.has_profile = True
        response.athlete_profile = AthleteProfileResponse.model_validate(viewer.athlete_profile)
        response.highlights = [HighlightResponse.model_validate(h) for h in profile_service.list_highlights(db, viewer.id)]
        response.stats = [StatResponse.model_validate(s) for s in profile_service.list_stats(db, viewer.id)]
        response.contact_requests = [
            ContactRequestResponse.model_validate(r) for r in list_contact_requests(db, viewer)
        ]
    elif viewer.is_coach and viewer.coach_profile:
        response.has_profile = True
        response.coach_profile = CoachProfileResponse.model_validate(viewer.coach_profile)

    if not response.has_profile:
        response.onboarding_route = onboarding_route(viewer.role)
    return response


@router.patch("/athlete", response_model=AthleteProfileResponse)
def update_athlete_profile(
    request: AthleteProfileFields,
    viewer: Viewer = Depends(require_athlete),
    db: Session = Depends(get_db),
):
    """Partial update; completeness is recomputed on every save."""
    profile = profile_service.upsert_athlete_profile(db, viewer.user, request.model_dump(exclude_unset=True))
    db.commit()
    return profile


@router.patch("/coach", response_model=CoachProfileResponse)
def update_coach_profile(
    request: CoachProfileUpdate,
    viewer: Viewer = Depends(require_coach),
    db: Session = Depends(get_db),
):
    if viewer.coach_profile is None:
        raise NotFoundError("Coach profile", str(viewer.id))
    profile = profile_service.update_coach_profile(db, viewer.coach_profile, request.model_dump(exclude_unset=True))
    db.commit()
    return profile


@router.get("/highlights", response_model=List[HighlightResponse])
def list_highlights(viewer: Viewer = Depends(require_athlete), db: Session = Depends(get_db)):
    return profile_service.list_highlights(db, viewer.id)


@router.post("/highlights", response_model=HighlightResponse, status_code=status.HTTP_201_CREATED)
def add_highlight(
    request: HighlightCreate,
    viewer: Viewer = Depends(require_athlete),
    db: Session = Depends(get_db),
):
    highlight = profile_service.add_highlight(db, viewer.id, request.title, request.url)
    db.commit()
    return highlight


@router.get("/stats", response_model=List[StatResponse])
def list_stats(viewer: Viewer = Depends(require_athlete), db: Session = Depends(get_db)):
    return profile_service.list_stats(db, viewer.id)


@router.post("/stats", response_model=StatResponse, status_code=status.HTTP_201_CREATED)
def add_stat(
    request: StatCreate,
    viewer: Viewer = Depends(require_athlete),
    db: Session = Depends(get_db),
):
    stat = profile_service.add_stat(db, viewer.id, **request.model_dump())
    db.commit()
    return stat


@router.post("/camps", response_model=CampResponse, status_code=status.HTTP_201_CREATED)
def add_camp(
    request: CampFields,
    viewer: Viewer = Depends(require_coach),
    db: Session = Depends(get_db),
):
    if viewer.coach_profile is None:
        raise NotFoundError("Coach profile", str(viewer.id))
    camp = profile_service.add_camp(db, viewer.coach_profile, request.model_dump())
    db.commit()
    return camp


@router.delete("/camps/{camp_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_camp(
    camp_id: UUID,
    viewer: Viewer = Depends(require_coach),
    db: Session = Depends(get_db),
):
    if viewer.coach_profile is None:
        raise NotFoundError("Coach profile", str(viewer.id))
    profile_service.delete_camp(db, viewer.coach_profile, camp_id)
    db.commit()
