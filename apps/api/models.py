from sqlalchemy import Column, Integer, Boolean, CheckConstraint, Float, DateTime, ForeignKey, JSON, Text, String, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from core.database import Base
import uuid
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite).
JSONList = JSON().with_variant(JSONB(), "postgresql")

ROLES = ("athlete", "coach", "admin")
VERIFICATION_STATUSES = ("pending", "verified", "rejected")
INTEREST_TYPES = ("LIKE", "FOLLOW", "TOP_CHOICE")
INTEREST_VISIBILITIES = ("PUBLIC_TO_VERIFIED_COACHES", "PRIVATE_UNTIL_APPROVED", "PRIVATE")
# Interests a verified coach of the school is allowed to see.
COACH_VISIBLE_INTEREST_VISIBILITIES = ("PUBLIC_TO_VERIFIED_COACHES", "PRIVATE_UNTIL_APPROVED")
STAT_SOURCE_TYPES = ("self_reported", "source_link", "upload")
CONTACT_REQUEST_STATUSES = ("pending", "accepted", "declined")
CONVERSATION_STATUSES = ("OPEN", "CLOSED")
SENDER_ROLES = ("ATHLETE", "COACH")
NOTIFICATION_TYPES = ("MESSAGE", "CONTACT_REQUEST", "CONTACT_RESPONSE", "VERIFICATION", "SYSTEM")
REPORT_TARGET_TYPES = ("thread", "post")
REPORT_STATUSES = ("pending", "reviewed", "dismissed")


def _in(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class User(Base):
    __tablename__ = "user_account"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    email = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    role = Column(Text, nullable=False)  # fixed at sign-up
    email_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    is_blocked = Column(Boolean, default=False, nullable=False)

    athlete_profile = relationship("AthleteProfile", back_populates="user", uselist=False)
    coach_profile = relationship("CoachProfile", back_populates="user", uselist=False)

    __table_args__ = (
        CheckConstraint(_in("role", ROLES), name="ck_user_account_role"),
    )


class AthleteProfile(Base):
    __tablename__ = "athlete_profile"

    user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), primary_key=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    sport = Column(Text, nullable=True)
    positions = Column(JSONList, nullable=False, default=list)
    grad_year = Column(Integer, nullable=True)
    city = Column(Text, nullable=True)
    state = Column(String(2), nullable=True)
    bio = Column(Text, nullable=True)
    gpa = Column(Float, nullable=True)
    sat_score = Column(Integer, nullable=True)
    act_score = Column(Integer, nullable=True)
    height_feet = Column(Integer, nullable=True)
    height_inches = Column(Integer, nullable=True)
    weight = Column(Integer, nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)
    # Display aid, recomputed on every save.
    completeness_score = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = relationship("User", back_populates="athlete_profile")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    __table_args__ = (
        Index("ix_athlete_profile_search", "is_public", "sport", "state", "grad_year"),
    )


class CoachProfile(Base):
    __tablename__ = "coach_profile"

    user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), primary_key=True)
    school = Column(Text, nullable=False)
    school_id = Column(Uuid, ForeignKey("school.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text, nullable=False)
    sports = Column(JSONList, nullable=False, default=list)
    verification_status = Column(Text, default="pending", nullable=False)
    looking_for = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = relationship("User", back_populates="coach_profile")
    linked_school = relationship("School", lazy="joined")
    camps = relationship(
        "CoachCamp",
        back_populates="coach_profile",
        order_by="CoachCamp.position",
        cascade="all, delete-orphan",
    )

    @property
    def is_verified(self) -> bool:
        return self.verification_status == "verified"

    __table_args__ = (
        CheckConstraint(_in("verification_status", VERIFICATION_STATUSES), name="ck_coach_profile_verification_status"),
    )


class CoachCamp(Base):
    """A camp a coach runs; ordered by position within the profile."""
    __tablename__ = "coach_camp"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    coach_user_id = Column(Uuid, ForeignKey("coach_profile.user_id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(Text, nullable=False)
    location = Column(Text, nullable=True)
    date = Column(Text, nullable=True)  # free text as entered ("June 12-14")
    url = Column(Text, nullable=True)

    coach_profile = relationship("CoachProfile", back_populates="camps")


class School(Base):
    __tablename__ = "school"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, index=True)
    division = Column(Text, nullable=True)
    city = Column(Text, nullable=True)
    state = Column(String(2), nullable=True)

    @property
    def location(self) -> str:
        return ", ".join(p for p in (self.city, self.state) if p)


class AthleteSchoolInterest(Base):
    __tablename__ = "athlete_school_interest"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    school_id = Column(Uuid, ForeignKey("school.id", ondelete="CASCADE"), nullable=False, index=True)
    interest_type = Column(Text, default="LIKE", nullable=False)
    visibility = Column(Text, default="PUBLIC_TO_VERIFIED_COACHES", nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    school = relationship("School", lazy="joined")

    __table_args__ = (
        UniqueConstraint("athlete_user_id", "school_id", name="uq_interest_athlete_school"),
        CheckConstraint(_in("interest_type", INTEREST_TYPES), name="ck_interest_type"),
        CheckConstraint(_in("visibility", INTEREST_VISIBILITIES), name="ck_interest_visibility"),
    )


class Highlight(Base):
    __tablename__ = "highlight"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)


class Stat(Base):
    __tablename__ = "stat"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False, index=True)
    season = Column(Text, nullable=False)
    stat_key = Column(Text, nullable=False)
    stat_value = Column(Text, nullable=False)
    source_type = Column(Text, nullable=False)
    source_url = Column(Text, nullable=True)
    provider = Column(Text, nullable=True)
    # Derived once from source_type at insert; there is no re-verification.
    verification_status = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(_in("source_type", STAT_SOURCE_TYPES), name="ck_stat_source_type"),
    )


class SavedAthlete(Base):
    """Coach shortlist entry."""
    __tablename__ = "saved_athlete"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    coach_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    athlete_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("coach_user_id", "athlete_user_id", name="uq_saved_athlete_pair"),
    )


class ContactRequest(Base):
    __tablename__ = "contact_request"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    coach_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False, index=True)
    athlete_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=True)
    status = Column(Text, default="pending", nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(_in("status", CONTACT_REQUEST_STATUSES), name="ck_contact_request_status"),
    )


class Conversation(Base):
    __tablename__ = "conversation"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    athlete_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    coach_user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    status = Column(Text, default="OPEN", nullable=False)
    initiated_by = Column(Uuid, ForeignKey("user_account.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    messages = relationship("Message", back_populates="conversation", order_by="Message.created_at", lazy="dynamic")

    __table_args__ = (
        UniqueConstraint("athlete_user_id", "coach_user_id", name="uq_conversation_pair"),
        CheckConstraint(_in("status", CONVERSATION_STATUSES), name="ck_conversation_status"),
        Index("ix_conversation_coach_updated", "coach_user_id", "updated_at"),
        Index("ix_conversation_athlete_updated", "athlete_user_id", "updated_at"),
    )


class Message(Base):
    __tablename__ = "message"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(Uuid, ForeignKey("conversation.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    sender_role = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        CheckConstraint(_in("sender_role", SENDER_ROLES), name="ck_message_sender_role"),
        Index("ix_message_conversation_created", "conversation_id", "created_at"),
    )


class Notification(Base):
    __tablename__ = "notification"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    type = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=True)
    related_id = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(_in("type", NOTIFICATION_TYPES), name="ck_notification_type"),
        Index("ix_notification_user_created", "user_id", "created_at"),
    )


class DiscussionThread(Base):
    __tablename__ = "discussion_thread"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    created_by = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    is_hidden = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    posts = relationship("DiscussionPost", back_populates="thread", order_by="DiscussionPost.created_at")


class DiscussionPost(Base):
    __tablename__ = "discussion_post"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    thread_id = Column(Uuid, ForeignKey("discussion_thread.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    body = Column(Text, nullable=False)
    is_hidden = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    thread = relationship("DiscussionThread", back_populates="posts")


class Report(Base):
    __tablename__ = "report"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reporter_id = Column(Uuid, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    target_type = Column(Text, nullable=False)
    target_id = Column(Uuid, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(Text, default="pending", nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(Uuid, ForeignKey("user_account.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        CheckConstraint(_in("target_type", REPORT_TARGET_TYPES), name="ck_report_target_type"),
        CheckConstraint(_in("status", REPORT_STATUSES), name="ck_report_status"),
    )
