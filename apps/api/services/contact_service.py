"""
Contact Requests

A verified coach asks to contact an athlete; the athlete accepts (which opens
the conversation) or declines.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core.auth import Viewer
from core.exceptions import ConflictError, NotFoundError
from models import AthleteProfile, ContactRequest, User
from services.messaging_service import ensure_conversation
from services.notification_service import create_notification

logger = logging.getLogger(__name__)


def create_contact_request(
    db: Session, coach: Viewer, athlete_id: UUID, message: Optional[str] = None
) -> ContactRequest:
    athlete = db.get(User, athlete_id)
    if not athlete or athlete.role != "athlete":
        raise NotFoundError("Athlete", str(athlete_id))
    profile = db.get(AthleteProfile, athlete_id)
    if profile is None or not profile.is_public:
        raise NotFoundError("Athlete", str(athlete_id))

    pending = (
        db.query(ContactRequest)
        .filter(
            ContactRequest.coach_user_id == coach.id,
            ContactRequest.athlete_user_id == athlete_id,
            ContactRequest.status == "pending",
        )
        .first()
    )
    if pending:
        raise ConflictError("A contact request to this athlete is already pending")

    request = ContactRequest(
        coach_user_id=coach.id,
        athlete_user_id=athlete_id,
        message=message,
        status="pending",
    )
    db.add(request)
    db.flush()

    school = coach.coach_profile.school if coach.coach_profile else "A coach"
    create_notification(
        db,
        user_id=athlete_id,
        type="CONTACT_REQUEST",
        title="New contact request",
        body=f"A coach from {school} would like to connect",
        related_id=request.id,
    )
    logger.info(f"Contact request {request.id} from coach {coach.id} to athlete {athlete_id}")
    return request


def list_contact_requests(db: Session, viewer: Viewer) -> List[ContactRequest]:
    """Incoming requests for athletes, sent requests for coaches."""
    query = db.query(ContactRequest)
    if viewer.is_coach:
        query = query.filter(ContactRequest.coach_user_id == viewer.id)
    else:
        query = query.filter(ContactRequest.athlete_user_id == viewer.id)
    return query.order_by(ContactRequest.created_at.desc()).all()


def respond_to_contact_request(db: Session, athlete: Viewer, request_id: UUID, accept: bool) -> ContactRequest:
    request = db.get(ContactRequest, request_id)
    if request is None or request.athlete_user_id != athlete.id:
        raise NotFoundError("Contact request", str(request_id))
    if request.status != "pending":
        raise ConflictError(f"Contact request already {request.status}")

    request.status = "accepted" if accept else "declined"
    request.responded_at = datetime.now(timezone.utc)

    related_id = request.id
    if accept:
        conversation, _ = ensure_conversation(
            db, athlete_id=athlete.id, coach_id=request.coach_user_id, initiated_by=request.coach_user_id
        )
        related_id = conversation.id

    name = athlete.athlete_profile.full_name if athlete.athlete_profile else ""
    create_notification(
        db,
        user_id=request.coach_user_id,
        type="CONTACT_RESPONSE",
        title="Contact request accepted" if accept else "Contact request declined",
        body=f"{name or 'The athlete'} {request.status} your request",
        related_id=related_id,
    )
    db.flush()
    return request

