"""
Athlete Search

Conjunctive filters over public athlete profiles for verified coaches, with
an optional "interested in my school" post-filter. No ranking or cursors:
newest profiles first, hard limit.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.auth import Viewer
from models import AthleteProfile, AthleteSchoolInterest, COACH_VISIBLE_INTEREST_VISIBILITIES, SavedAthlete
from schemas import AthleteCard
from services.school_service import visible_interests_by_athlete

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50


@dataclass
class AthleteSearchFilters:
    sport: Optional[str] = None
    state: Optional[str] = None
    grad_year: Optional[int] = None
    min_gpa: Optional[float] = None
    name: Optional[str] = None
    interested_in_my_school: bool = False


def saved_athlete_ids(db: Session, coach_id: UUID) -> Set[UUID]:
    rows = db.query(SavedAthlete.athlete_user_id).filter(SavedAthlete.coach_user_id == coach_id).all()
    return {row[0] for row in rows}


def interested_athlete_ids(db: Session, school_id: UUID) -> Set[UUID]:
    """Athletes whose interest in the school is visible to its verified coaches."""
    rows = (
        db.query(AthleteSchoolInterest.athlete_user_id)
        .filter(
            AthleteSchoolInterest.school_id == school_id,
            AthleteSchoolInterest.visibility.in_(COACH_VISIBLE_INTEREST_VISIBILITIES),
        )
        .all()
    )
    return {row[0] for row in rows}


def build_cards(db: Session, viewer: Viewer, profiles: List[AthleteProfile]) -> List[AthleteCard]:
    """Attach visible interests and the coach's saved flag to each profile."""
    my_school_id = viewer.coach_profile.school_id if viewer.coach_profile else None
    interests = visible_interests_by_athlete(db, [p.user_id for p in profiles], my_school_id)
    saved = saved_athlete_ids(db, viewer.id)

    cards = []
    for profile in profiles:
        athlete_interests = interests.get(profile.user_id, [])
        cards.append(
            AthleteCard(
                user_id=profile.user_id,
                first_name=profile.first_name,
                last_name=profile.last_name,
                sport=profile.sport,
                positions=profile.positions or [],
                grad_year=profile.grad_year,
                city=profile.city,
                state=profile.state,
                gpa=profile.gpa,
                completeness_score=profile.completeness_score or 0,
                interests=athlete_interests,
                interested_in_my_school=any(i.is_my_school for i in athlete_interests),
                saved=profile.user_id in saved,
            )
        )
    return cards


def search_athletes(
    db: Session, viewer: Viewer, filters: AthleteSearchFilters, limit: int = SEARCH_LIMIT
) -> List[AthleteCard]:
    query = db.query(AthleteProfile).filter(AthleteProfile.is_public.is_(True))

    if filters.sport:
        query = query.filter(AthleteProfile.sport == filters.sport)
    if filters.state:
        query = query.filter(AthleteProfile.state == filters.state.upper())
    if filters.grad_year is not None:
        query = query.filter(AthleteProfile.grad_year == filters.grad_year)
    if filters.min_gpa is not None:
        query = query.filter(AthleteProfile.gpa >= filters.min_gpa)
    if filters.name and filters.name.strip():
        pattern = f"%{filters.name.strip()}%"
        query = query.filter(
            or_(AthleteProfile.first_name.ilike(pattern), AthleteProfile.last_name.ilike(pattern))
        )

    profiles = query.order_by(AthleteProfile.created_at.desc()).limit(limit).all()

    school_id = viewer.coach_profile.school_id if viewer.coach_profile else None
    # Without a linked school the filter has nothing to match on and is skipped.
    if filters.interested_in_my_school and school_id is not None:
        wanted = interested_athlete_ids(db, school_id)
        profiles = [p for p in profiles if p.user_id in wanted]

    logger.info(
        "Athlete search",
        extra={"extra_fields": {"coach_id": str(viewer.id), "results": len(profiles)}},
    )
    return build_cards(db, viewer, profiles)
