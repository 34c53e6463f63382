from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.dependencies import require_admin, require_planning, require_production, scoped_company_id
from core.database import get_db
from core.exceptions import ValidationError
from core.security import get_current_user
from models.user import User
from schemas.acceptance import AcceptanceEventResponse, TransitionRequest
from schemas.check_in import DailyCheckResponse, PPCMetricsResponse
from schemas.schedule import ActivityCandidate
from schemas.weekly_plan import (
    PlannedActivityCreate,
    PlannedActivityResponse,
    PlanDetailsUpdate,
    PlannedQuantitiesUpdate,
    PlanProvisionRequest,
    PullForwardRequest,
    WeeklyPlanDetailResponse,
    WeeklyPlanResponse,
)
from services.acceptance_service import AcceptanceService
from services.activity_selector import ActivitySelector
from services.check_in_service import CheckInService
from services.config_service import get_week_start_day
from services.plan_service import PlanService
from services.ppc_service import PPCService
from services.week_service import compute_week, window_for_iso_week

router = APIRouter(prefix="/plans", tags=["planning"])


def _detail(plan_id: UUID, db: Session) -> dict:
    plan = PlanService.get_plan(plan_id, db)
    return PlanService.serialize_detail(plan, PlanService.list_activities(plan.id, db))


@router.get("/", response_model=List[WeeklyPlanResponse])
def list_plans(
    project_id: Optional[UUID] = None,
    company_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    plans = PlanService.list_plans(
        db, company_id=scoped_company_id(current_user, company_id), project_id=project_id
    )
    return [PlanService.serialize_plan(plan) for plan in plans]


@router.post("/provision", response_model=WeeklyPlanDetailResponse)
def provision_plan(
    payload: PlanProvisionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the plan for a week, creating and seeding it from the master schedule on first access."""
    company_id = payload.company_id or getattr(current_user, "company_id", None)
    if company_id is None:
        raise ValidationError("company_id is required")

    week_start = get_week_start_day()
    if payload.iso_week is not None and payload.iso_year is not None:
        window = window_for_iso_week(payload.iso_year, payload.iso_week, week_start)
    elif payload.reference_date is not None:
        window = compute_week(payload.reference_date, week_start)
    else:
        raise ValidationError("Provide reference_date or iso_week and iso_year")

    result = PlanService.get_or_create_plan(
        company_id=company_id,
        project_id=payload.project_id,
        iso_week=window.iso_week,
        iso_year=window.iso_year,
        window_start=window.start,
        window_end=window.end,
        db=db,
        responsible=payload.responsible,
    )
    return PlanService.serialize_detail(result.plan, result.activities, is_new=result.is_new)


@router.get("/{plan_id}", response_model=WeeklyPlanDetailResponse)
def get_plan(
    plan_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _detail(plan_id, db)


@router.patch("/{plan_id}", response_model=WeeklyPlanDetailResponse)
def update_plan_details(
    plan_id: UUID,
    payload: PlanDetailsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_planning),
):
    PlanService.update_plan_details(plan_id, db, responsible=payload.responsible, notes=payload.notes)
    return _detail(plan_id, db)


@router.get("/{plan_id}/available-activities", response_model=List[ActivityCandidate])
def list_available_activities(
    plan_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    plan = PlanService.get_plan(plan_id, db)
    return ActivitySelector.select_available_activities(
        plan.project_id, db, plan_id=plan.id, company_id=plan.company_id
    )


@router.post("/{plan_id}/activities", response_model=PlannedActivityResponse, status_code=status.HTTP_201_CREATED)
def add_activity(
    plan_id: UUID,
    payload: PlannedActivityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_planning),
):
    activity = PlanService.add_activity(
        plan_id,
        payload.name,
        db,
        code=payload.code,
        area=payload.area,
        unit=payload.unit,
        responsible=payload.responsible,
        planned_qty=payload.planned_qty,
        notes=payload.notes,
    )
    return PlanService.serialize_activity(activity)


@router.post(
    "/{plan_id}/activities/pull-forward",
    response_model=PlannedActivityResponse,
    status_code=status.HTTP_201_CREATED,
)
def pull_activity_forward(
    plan_id: UUID,
    payload: PullForwardRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_planning),
):
    activity = PlanService.pull_activity_forward(plan_id, payload.schedule_activity_id, db)
    return PlanService.serialize_activity(activity)


@router.put("/{plan_id}/activities/{activity_id}/planned", response_model=PlannedActivityResponse)
def update_planned_quantities(
    plan_id: UUID,
    activity_id: UUID,
    payload: PlannedQuantitiesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_planning),
):
    activity = PlanService.get_activity(activity_id, db)
    if activity.plan_id != plan_id:
        raise ValidationError("Activity is not part of this plan")
    activity = PlanService.update_planned_quantities(activity_id, payload.planned_qty, db)
    return PlanService.serialize_activity(activity)


@router.delete("/{plan_id}/activities/{activity_id}")
def remove_activity(
    plan_id: UUID,
    activity_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_planning),
):
    activity = PlanService.get_activity(activity_id, db)
    if activity.plan_id != plan_id:
        raise ValidationError("Activity is not part of this plan")
    PlanService.remove_activity(activity_id, db)
    return {"message": "Activity removed from plan"}


@router.get("/{plan_id}/check-ins", response_model=List[DailyCheckResponse])
def list_check_ins(
    plan_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PlanService.get_plan(plan_id, db)
    return CheckInService.list_check_ins(plan_id, db)


@router.post("/{plan_id}/metrics/recompute", response_model=PPCMetricsResponse)
def recompute_metrics(
    plan_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PPCService.recompute_metrics(plan_id, db).to_dict()


# ==================== ACCEPTANCE LIFECYCLE ====================

@router.get("/{plan_id}/acceptance-events", response_model=List[AcceptanceEventResponse])
def list_acceptance_events(
    plan_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PlanService.get_plan(plan_id, db)
    return [AcceptanceService.serialize_event(e) for e in AcceptanceService.list_events(plan_id, db)]


@router.post("/{plan_id}/submit", response_model=WeeklyPlanDetailResponse)
def submit_for_acceptance(
    plan_id: UUID,
    payload: Optional[TransitionRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_planning),
):
    AcceptanceService.submit_for_acceptance(plan_id, current_user, db, notes=payload.notes if payload else None)
    return _detail(plan_id, db)


@router.post("/{plan_id}/accept", response_model=WeeklyPlanDetailResponse)
def accept_plan(
    plan_id: UUID,
    payload: Optional[TransitionRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_production),
):
    AcceptanceService.accept(plan_id, current_user, db, notes=payload.notes if payload else None)
    return _detail(plan_id, db)


@router.post("/{plan_id}/reject", response_model=WeeklyPlanDetailResponse)
def reject_plan(
    plan_id: UUID,
    payload: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_production),
):
    AcceptanceService.reject(plan_id, current_user, db, notes=payload.notes)
    return _detail(plan_id, db)


@router.post("/{plan_id}/return-to-planning", response_model=WeeklyPlanDetailResponse)
def return_to_planning(
    plan_id: UUID,
    payload: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_planning),
):
    AcceptanceService.return_to_planning(plan_id, current_user, db, notes=payload.notes)
    return _detail(plan_id, db)


@router.post("/{plan_id}/start-execution", response_model=WeeklyPlanDetailResponse)
def start_execution(
    plan_id: UUID,
    payload: Optional[TransitionRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_production),
):
    AcceptanceService.start_execution(plan_id, current_user, db, notes=payload.notes if payload else None)
    return _detail(plan_id, db)


@router.post("/{plan_id}/complete", response_model=WeeklyPlanDetailResponse)
def complete_plan(
    plan_id: UUID,
    payload: Optional[TransitionRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_production),
):
    AcceptanceService.complete_execution(plan_id, current_user, db, notes=payload.notes if payload else None)
    return _detail(plan_id, db)


@router.post("/{plan_id}/status/rebuild", response_model=WeeklyPlanResponse)
def rebuild_status(
    plan_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Reset the cached plan status from the acceptance event log."""
    return PlanService.serialize_plan(AcceptanceService.rebuild_status(plan_id, db))
