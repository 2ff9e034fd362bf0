"""
Stats Providers API Router

Lists the stats sources athletes can attach to a stat line.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import List

from core.auth import get_current_user
from models import User
from services.stats_providers import StatsProviderRegistry

router = APIRouter(prefix="/v1/stats-providers", tags=["Stats Providers"])


class StatsProviderResponse(BaseModel):
    name: str
    display_name: str
    source_type: str
    enabled: bool


@router.get("", response_model=List[StatsProviderResponse])
def list_stats_providers(current_user: User = Depends(get_current_user)):
    """Enabled providers only."""
    return [StatsProviderResponse(**p.describe()) for p in StatsProviderRegistry.list_providers()]
