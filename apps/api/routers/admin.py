"""
Admin API Router

Moderation, coach verification and the school directory. Admin role only.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional
from uuid import UUID
from datetime import datetime, timezone
import logging

from core.auth import Viewer, require_admin
from core.cache import invalidate_school_cache
from core.database import get_db
from core.exceptions import NotFoundError, ValidationError
from models import CoachProfile, DiscussionPost, DiscussionThread, Report, User
from schemas import CoachProfileResponse, SchoolResponse
from services import school_service
from services.notification_service import create_notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["Admin"])


class ReportAdminResponse(BaseModel):
    id: UUID
    reporter_id: UUID
    target_type: str
    target_id: UUID
    reason: str
    status: str
    created_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ResolveReportRequest(BaseModel):
    status: Literal["reviewed", "dismissed"]
    hide_target: bool = False


class CoachVerificationRequest(BaseModel):
    status: Literal["pending", "verified", "rejected"]
    note: Optional[str] = None


class BlockUserRequest(BaseModel):
    blocked: bool


class SchoolCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    division: Optional[str] = Field(default=None, max_length=50)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, min_length=2, max_length=2)

    @field_validator("state")
    @classmethod
    def upper_state(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class UserAdminResponse(BaseModel):
    id: UUID
    email: str
    role: str
    is_blocked: bool

    model_config = ConfigDict(from_attributes=True)


def _audit(admin: Viewer, action: str, **fields) -> None:
    logger.info(
        f"Admin action: {action}",
        extra={"extra_fields": {"admin_id": str(admin.id), "action": action, **fields}},
    )


@router.get("/reports", response_model=List[ReportAdminResponse])
def list_reports(
    status: Optional[Literal["pending", "reviewed", "dismissed"]] = Query(default="pending"),
    admin: Viewer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Report)
    if status:
        query = query.filter(Report.status == status)
    return query.order_by(Report.created_at.asc()).all()


@router.post("/reports/{report_id}/resolve", response_model=ReportAdminResponse)
def resolve_report(
    report_id: UUID,
    request: ResolveReportRequest,
    admin: Viewer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    report = db.get(Report, report_id)
    if report is None:
        raise NotFoundError("Report", str(report_id))

    if request.hide_target:
        model = DiscussionThread if report.target_type == "thread" else DiscussionPost
        target = db.get(model, report.target_id)
        if target is not None:
            target.is_hidden = True

    report.status = request.status
    report.resolved_at = datetime.now(timezone.utc)
    report.resolved_by = admin.id
    db.commit()
    _audit(admin, "report.resolve", report_id=str(report.id), status=report.status, hidden=request.hide_target)
    return report


@router.get("/coaches", response_model=List[CoachProfileResponse])
def list_coaches(
    status: Optional[Literal["pending", "verified", "rejected"]] = Query(default="pending"),
    admin: Viewer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(CoachProfile)
    if status:
        query = query.filter(CoachProfile.verification_status == status)
    return query.order_by(CoachProfile.created_at.asc()).all()


@router.post("/coaches/{user_id}/verification", response_model=CoachProfileResponse)
def set_coach_verification(
    user_id: UUID,
    request: CoachVerificationRequest,
    admin: Viewer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    profile = db.get(CoachProfile, user_id)
    if profile is None:
        raise NotFoundError("Coach profile", str(user_id))

    previous = profile.verification_status
    profile.verification_status = request.status
    if previous != request.status and request.status != "pending":
        create_notification(
            db,
            user_id=user_id,
            type="VERIFICATION",
            title="Your coach profile was verified" if request.status == "verified" else "Coach verification update",
            body=request.note,
        )
    db.commit()
    _audit(admin, "coach.verification", coach_id=str(user_id), previous=previous, status=request.status)
    return profile


@router.post("/users/{user_id}/block", response_model=UserAdminResponse)
def block_user(
    user_id: UUID,
    request: BlockUserRequest,
    admin: Viewer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", str(user_id))
    if user.id == admin.id:
        raise ValidationError("Admins cannot block themselves")
    user.is_blocked = request.blocked
    db.commit()
    _audit(admin, "user.block", user_id=str(user_id), blocked=request.blocked)
    return user


@router.post("/schools", response_model=SchoolResponse, status_code=status.HTTP_201_CREATED)
def create_school(
    request: SchoolCreate,
    admin: Viewer = Depends(require_admin),
    db: Session = Depends(get_db),
):
    school = school_service.create_school(db, **request.model_dump())
    db.commit()
    invalidate_school_cache()
    _audit(admin, "school.create", school_id=str(school.id))
    return school
