from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.dependencies import scoped_company_id
from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.interference import (
    InterferenceCreate,
    InterferencePromoteRequest,
    InterferenceResolveRequest,
    InterferenceResponse,
)
from services.interference_service import InterferenceService

router = APIRouter(prefix="/interferences", tags=["interferences"])


@router.get("/", response_model=list[InterferenceResponse])
def list_interferences(
    project_id: Optional[UUID] = None,
    plan_id: Optional[UUID] = None,
    company_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reports = InterferenceService.list_interferences(
        db, project_id=project_id, plan_id=plan_id, company_id=scoped_company_id(current_user, company_id)
    )
    return [InterferenceService.serialize(report) for report in reports]


@router.post("/", response_model=InterferenceResponse, status_code=status.HTTP_201_CREATED)
def report_interference(
    payload: InterferenceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    report = InterferenceService.report_interference(
        project_id=payload.project_id,
        reporter_name=str(current_user.username),
        company_involved=payload.company_involved,
        company_type=payload.company_type,
        description=payload.description,
        occurred_at=payload.occurred_at,
        db=db,
        plan_id=payload.plan_id,
        activity_id=payload.activity_id,
        category=payload.category,
        impact=payload.impact,
        action_taken=payload.action_taken,
        sector=payload.sector or getattr(current_user, "sector", None),
        reporter_id=getattr(current_user, "id", None),
        company_id=getattr(current_user, "company_id", None),
    )
    return InterferenceService.serialize(report)


@router.get("/{interference_id}", response_model=InterferenceResponse)
def get_interference(
    interference_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return InterferenceService.serialize(InterferenceService.get_interference(interference_id, db))


@router.post("/{interference_id}/promote", response_model=InterferenceResponse)
def promote_interference(
    interference_id: UUID,
    payload: Optional[InterferencePromoteRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Convert into a constraint: link an existing one, or create it when no id is given."""
    if payload and payload.constraint_id:
        report = InterferenceService.promote_interference(interference_id, payload.constraint_id, db)
    else:
        report = InterferenceService.promote_to_new_constraint(interference_id, db)
    return InterferenceService.serialize(report)


@router.post("/{interference_id}/resolve", response_model=InterferenceResponse)
def resolve_interference(
    interference_id: UUID,
    payload: InterferenceResolveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    report = InterferenceService.resolve_interference(interference_id, payload.action_taken, db)
    return InterferenceService.serialize(report)
