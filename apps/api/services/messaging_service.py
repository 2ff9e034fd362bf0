"""
Messaging Service

Coach <-> athlete conversations. One conversation per (athlete, coach) pair,
enforced by a unique constraint; a duplicate create resolves to the existing
row.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.auth import Viewer
from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from models import AthleteProfile, CoachProfile, Conversation, Message, User
from schemas import ConversationSummary
from services.notification_service import create_notification

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _participant_filter(viewer: Viewer):
    if viewer.is_coach:
        return Conversation.coach_user_id == viewer.id
    return Conversation.athlete_user_id == viewer.id


def find_conversation(db: Session, athlete_id: UUID, coach_id: UUID) -> Optional[Conversation]:
    return (
        db.query(Conversation)
        .filter(Conversation.athlete_user_id == athlete_id, Conversation.coach_user_id == coach_id)
        .first()
    )


def ensure_conversation(
    db: Session, athlete_id: UUID, coach_id: UUID, initiated_by: UUID
) -> Tuple[Conversation, bool]:
    """
    Get or create the pair's conversation.

    Returns:
        (conversation, created)
    """
    existing = find_conversation(db, athlete_id, coach_id)
    if existing:
        if existing.status != "OPEN":
            existing.status = "OPEN"
            existing.updated_at = _now()
            db.flush()
        return existing, False

    conversation = Conversation(
        athlete_user_id=athlete_id,
        coach_user_id=coach_id,
        status="OPEN",
        initiated_by=initiated_by,
    )
    db.add(conversation)
    try:
        db.flush()
    except IntegrityError:
        # Concurrent create for the same pair won; use that row.
        db.rollback()
        existing = find_conversation(db, athlete_id, coach_id)
        if existing is None:
            raise
        logger.info(f"Concurrent conversation create for athlete {athlete_id}, coach {coach_id}")
        return existing, False

    logger.info(f"Conversation {conversation.id} opened by {initiated_by}")
    return conversation, True


def start_conversation(
    db: Session, coach: Viewer, athlete_id: UUID, initial_message: Optional[str] = None
) -> Tuple[Conversation, bool]:
    """Coach opens (or reopens) a conversation, optionally with a first message."""
    athlete = db.get(User, athlete_id)
    if not athlete or athlete.role != "athlete":
        raise NotFoundError("Athlete", str(athlete_id))

    conversation, created = ensure_conversation(db, athlete_id, coach.id, initiated_by=coach.id)

    if initial_message and initial_message.strip():
        _append_message(db, conversation, coach, initial_message.strip())

    if created:
        create_notification(
            db,
            user_id=athlete_id,
            type="MESSAGE",
            title="New conversation",
            body=_display_name(db, coach.id) + " started a conversation with you",
            related_id=conversation.id,
        )
    return conversation, created


def get_conversation_for(db: Session, viewer: Viewer, conversation_id: UUID) -> Conversation:
    """Load a conversation the viewer takes part in."""
    conversation = db.get(Conversation, conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation", str(conversation_id))
    if viewer.id not in (conversation.athlete_user_id, conversation.coach_user_id):
        # Same answer as a missing row so ids can't be enumerated.
        raise NotFoundError("Conversation", str(conversation_id))
    return conversation


def list_messages(db: Session, conversation_id: UUID) -> List[Message]:
    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc(), Message.id)
        .all()
    )


def mark_messages_read(db: Session, conversation: Conversation, viewer: Viewer) -> int:
    """Stamp read_at on the other party's unread messages."""
    updated = (
        db.query(Message)
        .filter(
            Message.conversation_id == conversation.id,
            Message.sender_id != viewer.id,
            Message.read_at.is_(None),
        )
        .update({Message.read_at: _now()}, synchronize_session="fetch")
    )
    db.flush()
    return updated


def _sender_role(viewer: Viewer) -> str:
    if viewer.is_coach:
        return "COACH"
    if viewer.is_athlete:
        return "ATHLETE"
    raise ForbiddenError("Only athletes and coaches can send messages")


def _append_message(db: Session, conversation: Conversation, viewer: Viewer, body: str) -> Message:
    message = Message(
        conversation_id=conversation.id,
        sender_id=viewer.id,
        sender_role=_sender_role(viewer),
        body=body,
    )
    db.add(message)
    conversation.updated_at = _now()
    db.flush()
    return message


def send_message(db: Session, viewer: Viewer, conversation: Conversation, body: str) -> Message:
    """Append a message, bump the conversation to the top, notify the other side."""
    body = (body or "").strip()
    if not body:
        raise ValidationError("Message body cannot be empty", field="body")
    if conversation.status != "OPEN":
        raise ForbiddenError("Conversation is closed")

    message = _append_message(db, conversation, viewer, body)

    recipient_id = (
        conversation.athlete_user_id if viewer.is_coach else conversation.coach_user_id
    )
    create_notification(
        db,
        user_id=recipient_id,
        type="MESSAGE",
        title="New message",
        body=body[:140],
        related_id=conversation.id,
    )
    return message


def _display_name(db: Session, user_id: UUID) -> str:
    athlete = db.get(AthleteProfile, user_id)
    if athlete and athlete.full_name:
        return athlete.full_name
    coach = db.get(CoachProfile, user_id)
    if coach:
        return f"{coach.title}, {coach.school}"
    user = db.get(User, user_id)
    return user.email if user else "Unknown"


def list_conversations(db: Session, viewer: Viewer) -> List[ConversationSummary]:
    """Open conversations, most recently active first."""
    conversations = (
        db.query(Conversation)
        .filter(_participant_filter(viewer), Conversation.status == "OPEN")
        .order_by(Conversation.updated_at.desc())
        .all()
    )
    if not conversations:
        return []

    ids = [c.id for c in conversations]
    unread = dict(
        db.query(Message.conversation_id, func.count(Message.id))
        .filter(
            Message.conversation_id.in_(ids),
            Message.sender_id != viewer.id,
            Message.read_at.is_(None),
        )
        .group_by(Message.conversation_id)
        .all()
    )

    summaries = []
    for conversation in conversations:
        counterpart_id = (
            conversation.athlete_user_id if viewer.is_coach else conversation.coach_user_id
        )
        last = (
            db.query(Message.body)
            .filter(Message.conversation_id == conversation.id)
            .order_by(Message.created_at.desc())
            .first()
        )
        summaries.append(
            ConversationSummary(
                id=conversation.id,
                athlete_user_id=conversation.athlete_user_id,
                coach_user_id=conversation.coach_user_id,
                status=conversation.status,
                updated_at=conversation.updated_at,
                counterpart_name=_display_name(db, counterpart_id),
                unread_count=unread.get(conversation.id, 0),
                last_message=last[0] if last else None,
            )
        )
    return summaries
