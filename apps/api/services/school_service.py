"""
School Service

School lookup (reference data, cached) and athlete -> school interest signals.
"""

import logging
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.cache import SCHOOL_CACHE_PREFIX, cache_key, get_cache, set_cache
from core.config import settings
from core.exceptions import ConflictError, NotFoundError
from models import AthleteSchoolInterest, COACH_VISIBLE_INTEREST_VISIBILITIES, School
from schemas import SchoolResponse, VisibleInterest

logger = logging.getLogger(__name__)

SCHOOL_SEARCH_LIMIT = 50
SUGGESTED_SCHOOLS_LIMIT = 6


def search_schools(db: Session, q: Optional[str] = None, limit: int = SCHOOL_SEARCH_LIMIT) -> List[dict]:
    """Name substring search, alphabetical. Results are cached as plain dicts."""
    term = (q or "").strip()
    key = cache_key(SCHOOL_CACHE_PREFIX, "search", q=term.lower() or None, limit=limit)
    cached = get_cache(key)
    if cached is not None:
        return cached

    query = db.query(School)
    if term:
        query = query.filter(School.name.ilike(f"%{term}%"))
    schools = query.order_by(School.name).limit(limit).all()

    result = [SchoolResponse.model_validate(s).model_dump(mode="json") for s in schools]
    set_cache(key, result, ttl=settings.CACHE_TTL_SCHOOLS)
    return result


def get_school(db: Session, school_id: UUID) -> School:
    school = db.get(School, school_id)
    if not school:
        raise NotFoundError("School", str(school_id))
    return school


def create_school(
    db: Session,
    name: str,
    division: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
) -> School:
    """
    Add a school to the directory. Names are unique ignoring case.

    Cached lookups are not touched here; invalidate them once the insert is
    committed.
    """
    name = name.strip()
    if db.query(School).filter(func.lower(School.name) == name.lower()).first():
        raise ConflictError(f"School '{name}' already exists")
    school = School(name=name, division=division, city=city, state=state)
    db.add(school)
    db.flush()
    logger.info(f"Created school {school.id}: {name}")
    return school


def suggested_schools(db: Session, athlete_id: UUID, limit: int = SUGGESTED_SCHOOLS_LIMIT) -> List[School]:
    """Schools the athlete has not signaled interest in yet."""
    already = select(AthleteSchoolInterest.school_id).where(
        AthleteSchoolInterest.athlete_user_id == athlete_id
    )
    return (
        db.query(School)
        .filter(School.id.not_in(already))
        .order_by(School.name)
        .limit(limit)
        .all()
    )


def list_interests(db: Session, athlete_id: UUID) -> List[AthleteSchoolInterest]:
    return (
        db.query(AthleteSchoolInterest)
        .filter(AthleteSchoolInterest.athlete_user_id == athlete_id)
        .order_by(AthleteSchoolInterest.created_at.desc())
        .all()
    )


def get_interest(db: Session, athlete_id: UUID, school_id: UUID) -> Optional[AthleteSchoolInterest]:
    return (
        db.query(AthleteSchoolInterest)
        .filter(
            AthleteSchoolInterest.athlete_user_id == athlete_id,
            AthleteSchoolInterest.school_id == school_id,
        )
        .first()
    )


def set_interest(
    db: Session,
    athlete_id: UUID,
    school_id: UUID,
    interest_type: Optional[str] = None,
    visibility: Optional[str] = None,
) -> AthleteSchoolInterest:
    """
    Add an interest (LIKE, visible to verified coaches, unless told otherwise)
    or update the type/visibility of an existing one.
    """
    get_school(db, school_id)

    interest = get_interest(db, athlete_id, school_id)
    if interest is None:
        interest = AthleteSchoolInterest(
            athlete_user_id=athlete_id,
            school_id=school_id,
            interest_type=interest_type or "LIKE",
            visibility=visibility or "PUBLIC_TO_VERIFIED_COACHES",
        )
        db.add(interest)
        try:
            db.flush()
        except IntegrityError:
            # Lost a race with a concurrent add; the unique pair already exists.
            db.rollback()
            interest = get_interest(db, athlete_id, school_id)
            if interest is None:
                raise
            logger.info(f"Concurrent interest insert for athlete {athlete_id}, school {school_id}")
        else:
            return interest

    if interest_type:
        interest.interest_type = interest_type
    if visibility:
        interest.visibility = visibility
    db.flush()
    return interest


def remove_interest(db: Session, athlete_id: UUID, school_id: UUID) -> bool:
    """Returns False when there was nothing to remove."""
    interest = get_interest(db, athlete_id, school_id)
    if interest is None:
        return False
    db.delete(interest)
    db.flush()
    return True


def visible_interests_by_athlete(
    db: Session, athlete_ids: Iterable[UUID], my_school_id: Optional[UUID] = None
) -> Dict[UUID, List[VisibleInterest]]:
    """Interests a verified coach may see, grouped by athlete."""
    ids = list(athlete_ids)
    grouped: Dict[UUID, List[VisibleInterest]] = {athlete_id: [] for athlete_id in ids}
    if not ids:
        return grouped

    rows = (
        db.query(AthleteSchoolInterest)
        .filter(
            AthleteSchoolInterest.athlete_user_id.in_(ids),
            AthleteSchoolInterest.visibility.in_(COACH_VISIBLE_INTEREST_VISIBILITIES),
        )
        .order_by(AthleteSchoolInterest.created_at.desc())
        .all()
    )
    for row in rows:
        grouped[row.athlete_user_id].append(
            VisibleInterest(
                school_id=row.school_id,
                school_name=row.school.name,
                interest_type=row.interest_type or "LIKE",
                is_my_school=my_school_id is not None and row.school_id == my_school_id,
            )
        )
    return grouped
