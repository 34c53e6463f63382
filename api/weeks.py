from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from core.security import get_current_user
from models.user import User
from schemas.weekly_plan import WeekWindowResponse
from services.config_service import get_week_start_day
from services.week_service import compute_week

router = APIRouter(prefix="/weeks", tags=["weeks"])


@router.get("/resolve", response_model=WeekWindowResponse)
def resolve_week(
    reference_date: Optional[str] = None,
    current_user: User = Depends(get_current_user),
):
    """Week window (ISO week, year, start, end) containing the reference date; today by default."""
    window = compute_week(reference_date or date.today(), get_week_start_day())
    return {
        "iso_week": window.iso_week,
        "iso_year": window.iso_year,
        "start": window.start,
        "end": window.end,
        "label": window.label,
    }
