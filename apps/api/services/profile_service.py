"""
Profile Service

Athlete and coach profile persistence plus the derived completeness score.

Completeness is a display aid: a fixed weight per filled field, recomputed on
every save, capped at 100.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from models import AthleteProfile, CoachCamp, CoachProfile, Highlight, School, Stat, User
from services.stats_providers import StatsProviderError, StatsProviderRegistry

logger = logging.getLogger(__name__)

COMPLETENESS_FIELDS = ("first_name", "last_name", "sport", "grad_year", "city", "state", "gpa")
FIELD_WEIGHT = 14
POSITIONS_WEIGHT = 14
BIO_WEIGHT = 2
MAX_COMPLETENESS = 100

REQUIRED_COACH_FIELDS = ("school", "title", "sports")


def calculate_completeness(profile: Any) -> int:
    """
    Score how filled-in a profile is.

    Accepts anything with the profile attributes (model instance or namespace).
    A field counts when truthy; positions count when the list is non-empty.
    """
    score = sum(FIELD_WEIGHT for field in COMPLETENESS_FIELDS if getattr(profile, field, None))
    if getattr(profile, "positions", None):
        score += POSITIONS_WEIGHT
    if getattr(profile, "bio", None):
        score += BIO_WEIGHT
    return min(score, MAX_COMPLETENESS)


def _apply_fields(target: Any, fields: Dict[str, Any]) -> None:
    for key, value in fields.items():
        setattr(target, key, value)


# --- Athlete ---

def upsert_athlete_profile(db: Session, user: User, fields: Dict[str, Any]) -> AthleteProfile:
    """Create or update the athlete's profile and recompute completeness."""
    profile = db.get(AthleteProfile, user.id)
    if profile is None:
        profile = AthleteProfile(user_id=user.id, positions=[], is_public=True)
        db.add(profile)
        logger.info(f"Creating athlete profile for {user.id}")

    if fields.get("positions") is None:
        fields.pop("positions", None)
    if fields.get("is_public") is None:
        fields.pop("is_public", None)
    _apply_fields(profile, fields)

    profile.completeness_score = calculate_completeness(profile)
    db.flush()
    return profile


def add_highlight(db: Session, user_id: UUID, title: str, url: str) -> Highlight:
    highlight = Highlight(athlete_user_id=user_id, title=title, url=url)
    db.add(highlight)
    db.flush()
    return highlight


def list_highlights(db: Session, user_id: UUID) -> List[Highlight]:
    return (
        db.query(Highlight)
        .filter(Highlight.athlete_user_id == user_id)
        .order_by(Highlight.created_at.desc())
        .all()
    )


def derive_stat_verification(source_type: str) -> str:
    """Stats are either self-reported or come with a source; nothing re-verifies them."""
    return "self_reported" if source_type == "self_reported" else "source_provided"


def add_stat(
    db: Session,
    user_id: UUID,
    season: str,
    stat_key: str,
    stat_value: str,
    source_type: str,
    source_url: Optional[str] = None,
    provider: Optional[str] = None,
) -> Stat:
    if provider:
        try:
            StatsProviderRegistry.validate_provider_usage(provider)
        except StatsProviderError as e:
            raise ValidationError(str(e), field="provider")

    if source_type == "source_link" and not source_url:
        raise ValidationError("source_url is required for linked stats", field="source_url")

    stat = Stat(
        athlete_user_id=user_id,
        season=season,
        stat_key=stat_key,
        stat_value=stat_value,
        source_type=source_type,
        source_url=source_url,
        provider=provider.lower() if provider else None,
        verification_status=derive_stat_verification(source_type),
    )
    db.add(stat)
    db.flush()
    return stat


def list_stats(db: Session, user_id: UUID) -> List[Stat]:
    return (
        db.query(Stat)
        .filter(Stat.athlete_user_id == user_id)
        .order_by(Stat.season.desc(), Stat.created_at.desc())
        .all()
    )


# --- Coach ---

def _check_school(db: Session, school_id: Optional[UUID]) -> None:
    if school_id is not None and db.get(School, school_id) is None:
        raise NotFoundError("School", str(school_id))


def onboard_coach(db: Session, user: User, fields: Dict[str, Any]) -> CoachProfile:
    """Create or replace the coach profile; every onboarding goes back to pending review."""
    _check_school(db, fields.get("school_id"))
    profile = db.get(CoachProfile, user.id)
    if profile is None:
        profile = CoachProfile(user_id=user.id)
        db.add(profile)
    _apply_fields(profile, fields)
    profile.sports = fields.get("sports") or []
    profile.verification_status = "pending"
    db.flush()
    logger.info(f"Coach {user.id} onboarded, verification pending")
    return profile


def update_coach_profile(db: Session, profile: CoachProfile, fields: Dict[str, Any]) -> CoachProfile:
    """
    Partial update. Changing the school sends the profile back to review since
    verification vouches for the coach/school pairing.
    """
    # null on a required column means "leave unchanged"
    for key in REQUIRED_COACH_FIELDS:
        if key in fields and fields[key] is None:
            fields.pop(key)
    if "school_id" in fields:
        _check_school(db, fields["school_id"])
    school_changed = any(
        key in fields and fields[key] != getattr(profile, key)
        for key in ("school", "school_id")
    )
    _apply_fields(profile, fields)
    if school_changed and profile.verification_status != "pending":
        profile.verification_status = "pending"
        logger.info(f"Coach {profile.user_id} changed school, verification reset")
    db.flush()
    return profile


def add_camp(db: Session, profile: CoachProfile, fields: Dict[str, Any]) -> CoachCamp:
    next_position = (
        db.query(func.max(CoachCamp.position))
        .filter(CoachCamp.coach_user_id == profile.user_id)
        .scalar()
    )
    camp = CoachCamp(
        coach_user_id=profile.user_id,
        position=0 if next_position is None else next_position + 1,
        **fields,
    )
    db.add(camp)
    db.flush()
    db.refresh(profile)
    return camp


def delete_camp(db: Session, profile: CoachProfile, camp_id: UUID) -> None:
    camp = (
        db.query(CoachCamp)
        .filter(CoachCamp.id == camp_id, CoachCamp.coach_user_id == profile.user_id)
        .first()
    )
    if not camp:
        raise NotFoundError("Camp", str(camp_id))
    db.delete(camp)
    db.flush()
    db.refresh(profile)
