import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core.database import commit_or_abort
from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.interference import CompanyType, FieldInterference, InterferenceCategory, InterferenceStatus
from services.constraint_service import ConstraintService
from services.plan_service import PlanService

log = logging.getLogger(__name__)


class InterferenceService:
    @staticmethod
    def report_interference(
        project_id: UUID,
        reporter_name: str,
        company_involved: str,
        company_type: CompanyType,
        description: str,
        occurred_at: datetime,
        db: Session,
        plan_id: Optional[UUID] = None,
        activity_id: Optional[UUID] = None,
        category: Optional[InterferenceCategory] = None,
        impact: Optional[str] = None,
        action_taken: Optional[str] = None,
        sector: Optional[str] = None,
        reporter_id: Optional[UUID] = None,
        company_id: Optional[UUID] = None,
    ) -> FieldInterference:
        if not description or not description.strip():
            raise ValidationError("Description is required")
        if not company_involved or not company_involved.strip():
            raise ValidationError("Company involved is required")

        activity_code = None
        activity_name = None
        if plan_id is not None:
            plan = PlanService.get_plan(plan_id, db)
            if plan.project_id != project_id:
                raise ValidationError("Plan belongs to a different project")
        if activity_id is not None:
            activity = PlanService.get_activity(activity_id, db)
            if plan_id is not None and activity.plan_id != plan_id:
                raise ValidationError("Activity is not part of the given plan")
            activity_code = activity.code
            activity_name = activity.name

        interference = FieldInterference(
            company_id=company_id,
            project_id=project_id,
            plan_id=plan_id,
            activity_id=activity_id,
            activity_code=activity_code,
            activity_name=activity_name,
            reporter_id=reporter_id,
            reporter_name=reporter_name.strip(),
            sector=(sector or "").strip() or None,
            company_involved=company_involved.strip(),
            company_type=company_type,
            category=category,
            description=description.strip(),
            impact=(impact or "").strip() or None,
            action_taken=(action_taken or "").strip() or None,
            occurred_at=occurred_at,
            status=InterferenceStatus.OPEN,
        )
        db.add(interference)
        commit_or_abort(db, "report interference")
        db.refresh(interference)
        return interference

    @staticmethod
    def get_interference(interference_id: UUID, db: Session) -> FieldInterference:
        interference = db.query(FieldInterference).filter(FieldInterference.id == interference_id).first()
        if not interference:
            raise NotFoundError("Interference", interference_id)
        return interference

    @staticmethod
    def list_interferences(
        db: Session,
        project_id: Optional[UUID] = None,
        plan_id: Optional[UUID] = None,
        company_id: Optional[UUID] = None,
    ) -> List[FieldInterference]:
        query = db.query(FieldInterference)
        if company_id is not None:
            query = query.filter(FieldInterference.company_id == company_id)
        if project_id is not None:
            query = query.filter(FieldInterference.project_id == project_id)
        if plan_id is not None:
            query = query.filter(FieldInterference.plan_id == plan_id)
        return query.order_by(FieldInterference.occurred_at.desc()).all()

    @staticmethod
    def _ensure_open(interference: FieldInterference, action: str) -> None:
        if interference.status != InterferenceStatus.OPEN:
            raise ConflictError(
                f"Cannot {action} interference in status {interference.status.value}"
            )

    @staticmethod
    def promote_interference(interference_id: UUID, constraint_id: UUID, db: Session) -> FieldInterference:
        """OPEN -> CONVERTED, linking the constraint created from it. Terminal."""
        interference = InterferenceService.get_interference(interference_id, db)
        InterferenceService._ensure_open(interference, "promote")

        interference.status = InterferenceStatus.CONVERTED
        interference.converted_constraint_id = constraint_id
        commit_or_abort(db, "promote interference")
        db.refresh(interference)
        log.info("Interference %s converted into constraint %s", interference.id, constraint_id)
        return interference

    @staticmethod
    def promote_to_new_constraint(interference_id: UUID, db: Session) -> FieldInterference:
        """Create the constraint from the interference, then promote it."""
        interference = InterferenceService.get_interference(interference_id, db)
        InterferenceService._ensure_open(interference, "promote")

        schedule_activity_id = None
        if interference.activity_id is not None:
            schedule_activity_id = PlanService.get_activity(interference.activity_id, db).schedule_activity_id

        constraint = ConstraintService.create_constraint(
            project_id=interference.project_id,
            description=interference.description,
            db=db,
            activity_id=schedule_activity_id,
            category=interference.category.value if interference.category else None,
            company_id=interference.company_id,
            source_interference_id=interference.id,
        )
        return InterferenceService.promote_interference(interference.id, constraint.id, db)

    @staticmethod
    def resolve_interference(interference_id: UUID, action_taken: str, db: Session) -> FieldInterference:
        if not action_taken or not action_taken.strip():
            raise ValidationError("Action taken is required to resolve an interference")
        interference = InterferenceService.get_interference(interference_id, db)
        InterferenceService._ensure_open(interference, "resolve")

        interference.status = InterferenceStatus.RESOLVED
        interference.action_taken = action_taken.strip()
        commit_or_abort(db, "resolve interference")
        db.refresh(interference)
        return interference

    @staticmethod
    def serialize(interference: FieldInterference) -> dict:
        return {
            "id": interference.id,
            "company_id": interference.company_id,
            "project_id": interference.project_id,
            "plan_id": interference.plan_id,
            "activity_id": interference.activity_id,
            "activity_code": interference.activity_code,
            "activity_name": interference.activity_name,
            "reporter_id": interference.reporter_id,
            "reporter_name": interference.reporter_name,
            "sector": interference.sector,
            "company_involved": interference.company_involved,
            "company_type": interference.company_type,
            "category": interference.category,
            "description": interference.description,
            "impact": interference.impact,
            "action_taken": interference.action_taken,
            "occurred_at": interference.occurred_at,
            "recorded_at": interference.recorded_at,
            "status": interference.status.value,
            "converted_constraint_id": interference.converted_constraint_id,
        }
