"""
Shortlist API Router

A verified coach's saved athletes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from core.auth import Viewer, require_verified_coach
from core.database import get_db
from core.exceptions import NotFoundError
from models import AthleteProfile, SavedAthlete
from schemas import AthleteCard
from services.search_service import build_cards

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/shortlist", tags=["Shortlist"])


def _saved(db: Session, coach_id: UUID, athlete_id: UUID):
    return (
        db.query(SavedAthlete)
        .filter(SavedAthlete.coach_user_id == coach_id, SavedAthlete.athlete_user_id == athlete_id)
        .first()
    )


@router.get("", response_model=List[AthleteCard])
def list_shortlist(viewer: Viewer = Depends(require_verified_coach), db: Session = Depends(get_db)):
    profiles = (
        db.query(AthleteProfile)
        .join(SavedAthlete, SavedAthlete.athlete_user_id == AthleteProfile.user_id)
        .filter(SavedAthlete.coach_user_id == viewer.id, AthleteProfile.is_public.is_(True))
        .order_by(SavedAthlete.created_at.desc())
        .all()
    )
    return build_cards(db, viewer, profiles)


@router.put("/{athlete_id}", status_code=status.HTTP_204_NO_CONTENT)
def save_athlete(
    athlete_id: UUID,
    viewer: Viewer = Depends(require_verified_coach),
    db: Session = Depends(get_db),
):
    """Idempotent: saving twice keeps one entry."""
    profile = db.get(AthleteProfile, athlete_id)
    if profile is None or not profile.is_public:
        raise NotFoundError("Athlete", str(athlete_id))
    if _saved(db, viewer.id, athlete_id) is None:
        db.add(SavedAthlete(coach_user_id=viewer.id, athlete_user_id=athlete_id))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(f"Shortlist entry already exists for coach {viewer.id}, athlete {athlete_id}")


@router.delete("/{athlete_id}", status_code=status.HTTP_204_NO_CONTENT)
def unsave_athlete(
    athlete_id: UUID,
    viewer: Viewer = Depends(require_verified_coach),
    db: Session = Depends(get_db),
):
    entry = _saved(db, viewer.id, athlete_id)
    if entry is not None:
        db.delete(entry)
        db.commit()
