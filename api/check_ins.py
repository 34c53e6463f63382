from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.check_in import CheckInRequest, CheckInResponse, DailyCheckResponse
from services.check_in_service import CheckInService

router = APIRouter(prefix="/check-ins", tags=["check-ins"])


@router.post("/", response_model=CheckInResponse)
def record_check_in(
    payload: CheckInRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Record a day's actual quantity for one activity.

    A shortfall without a cause is not saved: the response carries
    `cause_required: true` and the client must resubmit with a cause.
    Plan metrics are refreshed separately via /plans/{id}/metrics/recompute.
    """
    outcome = CheckInService.record_check_in(
        activity_id=payload.activity_id,
        check_date=payload.check_date,
        actual_qty=payload.actual_qty,
        db=db,
        weekday=payload.weekday,
        cause=payload.cause,
        cause_description=payload.cause_description,
        notes=payload.notes,
        recorded_by=str(current_user.username),
    )
    return {
        "committed": outcome.committed,
        "cause_required": outcome.cause_required,
        "planned_qty": outcome.planned_qty,
        "completed": outcome.completed,
        "record": DailyCheckResponse.model_validate(outcome.record) if outcome.record else None,
    }
