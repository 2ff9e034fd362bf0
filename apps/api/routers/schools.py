"""
Schools API Router

Browse schools and manage the athlete's interest signals ("liked" schools).
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID

from core.auth import Viewer, get_current_user, require_athlete
from core.database import get_db
from core.exceptions import NotFoundError
from models import User
from schemas import InterestResponse, InterestType, InterestVisibility, SchoolResponse
from services import school_service

router = APIRouter(prefix="/v1/schools", tags=["Schools"])


class InterestUpdate(BaseModel):
    interest_type: Optional[InterestType] = None
    visibility: Optional[InterestVisibility] = None


@router.get("", response_model=List[SchoolResponse])
def search_schools(
    q: Optional[str] = Query(default=None, max_length=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return school_service.search_schools(db, q)


@router.get("/suggested", response_model=List[SchoolResponse])
def suggested_schools(viewer: Viewer = Depends(require_athlete), db: Session = Depends(get_db)):
    return school_service.suggested_schools(db, viewer.id)


@router.get("/interests", response_model=List[InterestResponse])
def list_interests(viewer: Viewer = Depends(require_athlete), db: Session = Depends(get_db)):
    """Liked schools, newest first."""
    return school_service.list_interests(db, viewer.id)


@router.put("/{school_id}/interest", response_model=InterestResponse)
def set_interest(
    school_id: UUID,
    request: Optional[InterestUpdate] = None,
    viewer: Viewer = Depends(require_athlete),
    db: Session = Depends(get_db),
):
    """Add an interest, or change its type/visibility if it already exists."""
    request = request or InterestUpdate()
    interest = school_service.set_interest(
        db, viewer.id, school_id, request.interest_type, request.visibility
    )
    db.commit()
    return interest


@router.delete("/{school_id}/interest", status_code=status.HTTP_204_NO_CONTENT)
def remove_interest(
    school_id: UUID,
    viewer: Viewer = Depends(require_athlete),
    db: Session = Depends(get_db),
):
    if not school_service.remove_interest(db, viewer.id, school_id):
        raise NotFoundError("Interest", str(school_id))
    db.commit()
