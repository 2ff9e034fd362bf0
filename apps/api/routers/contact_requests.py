"""
Contact Requests API Router
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID

from core.auth import Viewer, get_viewer, require_athlete, require_verified_coach
from core.database import get_db
from schemas import ContactRequestResponse
from services.contact_service import (
    create_contact_request,
    list_contact_requests,
    respond_to_contact_request,
)

router = APIRouter(prefix="/v1/contact-requests", tags=["Contact Requests"])


class ContactRequestCreate(BaseModel):
    athlete_id: UUID
    message: Optional[str] = Field(default=None, max_length=500)


class ContactRequestRespond(BaseModel):
    accept: bool


@router.post("", response_model=ContactRequestResponse, status_code=status.HTTP_201_CREATED)
def send_contact_request(
    request: ContactRequestCreate,
    viewer: Viewer = Depends(require_verified_coach),
    db: Session = Depends(get_db),
):
    contact = create_contact_request(db, viewer, request.athlete_id, request.message)
    db.commit()
    return contact


@router.get("", response_model=List[ContactRequestResponse])
def get_contact_requests(viewer: Viewer = Depends(get_viewer), db: Session = Depends(get_db)):
    """Athletes see requests they received; coaches see requests they sent."""
    return list_contact_requests(db, viewer)


@router.post("/{request_id}/respond", response_model=ContactRequestResponse)
def respond(
    request_id: UUID,
    request: ContactRequestRespond,
    viewer: Viewer = Depends(require_athlete),
    db: Session = Depends(get_db),
):
    contact = respond_to_contact_request(db, viewer, request_id, request.accept)
    db.commit()
    return contact
