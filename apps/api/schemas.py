from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from uuid import UUID
from typing import Optional, List, Literal


Role = Literal["athlete", "coach", "admin"]
InterestType = Literal["LIKE", "FOLLOW", "TOP_CHOICE"]
InterestVisibility = Literal["PUBLIC_TO_VERIFIED_COACHES", "PRIVATE_UNTIL_APPROVED", "PRIVATE"]
StatSourceTypeName = Literal["self_reported", "source_link", "upload"]
VerificationStatus = Literal["pending", "verified", "rejected"]


class UserResponse(BaseModel):
    id: UUID
    email: str
    role: Role
    email_confirmed_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Athlete profile ---

class AthleteProfileFields(BaseModel):
    """Editable athlete profile fields with the form's range checks."""
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    sport: Optional[str] = Field(default=None, max_length=100)
    positions: Optional[List[str]] = None
    grad_year: Optional[int] = Field(default=None, ge=2020, le=2030)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, min_length=2, max_length=2)
    bio: Optional[str] = Field(default=None, max_length=1000)
    gpa: Optional[float] = Field(default=None, ge=0, le=4)
    sat_score: Optional[int] = Field(default=None, ge=400, le=1600)
    act_score: Optional[int] = Field(default=None, ge=1, le=36)
    height_feet: Optional[int] = Field(default=None, ge=4, le=7)
    height_inches: Optional[int] = Field(default=None, ge=0, le=11)
    weight: Optional[int] = Field(default=None, ge=50, le=500)
    is_public: Optional[bool] = None

    @field_validator("state")
    @classmethod
    def upper_state(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    @field_validator("positions")
    @classmethod
    def clean_positions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return [p.strip() for p in v if p and p.strip()]


class AthleteProfileResponse(BaseModel):
    user_id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    sport: Optional[str] = None
    positions: List[str] = []
    grad_year: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    bio: Optional[str] = None
    gpa: Optional[float] = None
    sat_score: Optional[int] = None
    act_score: Optional[int] = None
    height_feet: Optional[int] = None
    height_inches: Optional[int] = None
    weight: Optional[int] = None
    is_public: bool = True
    completeness_score: int = 0
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Coach profile ---

class CampFields(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: Optional[str] = Field(default=None, max_length=200)
    date: Optional[str] = Field(default=None, max_length=100)
    url: Optional[str] = Field(default=None, max_length=500)


class CampResponse(CampFields):
    id: UUID
    position: int

    model_config = ConfigDict(from_attributes=True)


class CoachProfileResponse(BaseModel):
    user_id: UUID
    school: str
    school_id: Optional[UUID] = None
    title: str
    sports: List[str] = []
    verification_status: VerificationStatus
    looking_for: Optional[str] = None
    camps: List[CampResponse] = []
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Schools and interests ---

class SchoolResponse(BaseModel):
    id: UUID
    name: str
    division: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    location: str = ""

    model_config = ConfigDict(from_attributes=True)


class InterestResponse(BaseModel):
    id: UUID
    school_id: UUID
    interest_type: InterestType
    visibility: InterestVisibility
    created_at: datetime
    school: Optional[SchoolResponse] = None

    model_config = ConfigDict(from_attributes=True)


class VisibleInterest(BaseModel):
    """An athlete's interest as a coach is allowed to see it."""
    school_id: UUID
    school_name: str
    interest_type: InterestType
    is_my_school: bool = False


# --- Highlights / stats ---

class HighlightResponse(BaseModel):
    id: UUID
    title: str
    url: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatResponse(BaseModel):
    id: UUID
    season: str
    stat_key: str
    stat_value: str
    source_type: StatSourceTypeName
    source_url: Optional[str] = None
    provider: Optional[str] = None
    verification_status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Athlete cards (search, interested, shortlist) ---

class AthleteCard(BaseModel):
    user_id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    sport: Optional[str] = None
    positions: List[str] = []
    grad_year: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    gpa: Optional[float] = None
    completeness_score: int = 0
    interests: List[VisibleInterest] = []
    interested_in_my_school: bool = False
    saved: bool = False


# --- Contact requests ---

class ContactRequestResponse(BaseModel):
    id: UUID
    coach_user_id: UUID
    athlete_user_id: UUID
    message: Optional[str] = None
    status: str
    created_at: datetime
    responded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Messaging ---

class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    sender_role: Literal["ATHLETE", "COACH"]
    body: str
    created_at: datetime
    read_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConversationSummary(BaseModel):
    id: UUID
    athlete_user_id: UUID
    coach_user_id: UUID
    status: str
    updated_at: datetime
    counterpart_name: str
    unread_count: int = 0
    last_message: Optional[str] = None


# --- Notifications ---

class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    body: Optional[str] = None
    related_id: Optional[UUID] = None
    created_at: datetime
    read_at: Optional[datetime] = None
    target_route: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
