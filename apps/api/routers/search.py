"""
Search API Router

Athlete search for verified coaches.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from core.auth import Viewer, require_verified_coach
from core.database import get_db
from schemas import AthleteCard
from services.search_service import AthleteSearchFilters, search_athletes

router = APIRouter(prefix="/v1/search", tags=["Search"])


@router.get("/athletes", response_model=List[AthleteCard])
def search(
    sport: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None, min_length=2, max_length=2),
    grad_year: Optional[int] = Query(default=None, ge=2020, le=2030),
    min_gpa: Optional[float] = Query(default=None, ge=0, le=4),
    name: Optional[str] = Query(default=None, max_length=100, alias="search"),
    interested_in_my_school: bool = Query(default=False),
    viewer: Viewer = Depends(require_verified_coach),
    db: Session = Depends(get_db),
):
    """
    All filters are ANDed. `search` matches a substring of first or last name.
    Returns at most 50 public profiles.
    """
    filters = AthleteSearchFilters(
        sport=sport or None,
        state=state or None,
        grad_year=grad_year,
        min_gpa=min_gpa,
        name=name,
        interested_in_my_school=interested_in_my_school,
    )
    return search_athletes(db, viewer, filters)
