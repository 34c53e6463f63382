"""
Weekly plan provisioning and structural editing.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.database import commit_or_abort
from core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from models.planned_activity import ActivityStatus, PlannedActivity, empty_week
from models.weekly_plan import PlanStatus, WeeklyPlan
from schemas.schedule import ActivityCandidate
from services.activity_selector import ActivitySelector

log = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    plan: WeeklyPlan
    activities: List[PlannedActivity] = field(default_factory=list)
    is_new: bool = False


def _activity_from_candidate(candidate: ActivityCandidate, display_order: int) -> PlannedActivity:
    # Daily planned slots stay at zero; quantity targets are advisory only
    return PlannedActivity(
        schedule_activity_id=candidate.id,
        code=candidate.code,
        name=candidate.name,
        responsible=candidate.responsible,
        unit=candidate.quantity_targets[0].unit if candidate.quantity_targets else "un",
        has_constraint=candidate.has_constraint,
        constraint_id=candidate.constraint_id,
        constraint_description=candidate.constraint_description,
        planned_qty=empty_week(),
        actual_qty=empty_week(),
        activity_ppc=0.0,
        status=ActivityStatus.PENDING,
        display_order=display_order,
    )


class PlanService:
    @staticmethod
    def find_plan(
        company_id: UUID,
        project_id: UUID,
        iso_week: int,
        iso_year: int,
        db: Session,
    ) -> Optional[WeeklyPlan]:
        return db.query(WeeklyPlan).filter(
            WeeklyPlan.company_id == company_id,
            WeeklyPlan.project_id == project_id,
            WeeklyPlan.iso_week == iso_week,
            WeeklyPlan.iso_year == iso_year,
        ).first()

    @staticmethod
    def get_plan(plan_id: UUID, db: Session) -> WeeklyPlan:
        plan = db.query(WeeklyPlan).filter(WeeklyPlan.id == plan_id).first()
        if not plan:
            raise NotFoundError("Weekly plan", plan_id)
        return plan

    @staticmethod
    def list_plans(db: Session, company_id: Optional[UUID] = None, project_id: Optional[UUID] = None) -> List[WeeklyPlan]:
        query = db.query(WeeklyPlan)
        if company_id is not None:
            query = query.filter(WeeklyPlan.company_id == company_id)
        if project_id is not None:
            query = query.filter(WeeklyPlan.project_id == project_id)
        return query.order_by(WeeklyPlan.iso_year.desc(), WeeklyPlan.iso_week.desc()).all()

    @staticmethod
    def list_activities(plan_id: UUID, db: Session) -> List[PlannedActivity]:
        return (
            db.query(PlannedActivity)
            .filter(PlannedActivity.plan_id == plan_id)
            .order_by(PlannedActivity.display_order.asc())
            .all()
        )

    @staticmethod
    def get_activity(activity_id: UUID, db: Session) -> PlannedActivity:
        activity = db.query(PlannedActivity).filter(PlannedActivity.id == activity_id).first()
        if not activity:
            raise NotFoundError("Planned activity", activity_id)
        return activity

    @staticmethod
    def get_or_create_plan(
        company_id: UUID,
        project_id: UUID,
        iso_week: int,
        iso_year: int,
        window_start: date,
        window_end: date,
        db: Session,
        responsible: Optional[str] = None,
    ) -> ProvisionResult:
        """
        Return the plan for the week, creating and seeding it on first access.

        An existing plan is returned untouched. A new plan and its activities
        are written in one commit; if a concurrent request created the same
        week first, the unique key rejects ours and the winner is re-read.
        """
        existing = PlanService.find_plan(company_id, project_id, iso_week, iso_year, db)
        if existing:
            return ProvisionResult(existing, PlanService.list_activities(existing.id, db), False)

        candidates = ActivitySelector.select_activities_for_week(
            project_id, window_start, window_end, db, company_id=company_id
        )

        plan = WeeklyPlan(
            company_id=company_id,
            project_id=project_id,
            iso_week=iso_week,
            iso_year=iso_year,
            start_date=window_start,
            end_date=window_end,
            status=PlanStatus.PLANNED,
            weekly_ppc=0.0,
            total_activities=0,
            completed_activities=0,
            activities_with_constraint=0,
            responsible=responsible,
        )
        plan.activities = [_activity_from_candidate(c, idx) for idx, c in enumerate(candidates)]
        db.add(plan)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            log.warning(
                "Plan for project %s week %s/%s created concurrently; re-reading",
                project_id, iso_week, iso_year,
            )
            winner = PlanService.find_plan(company_id, project_id, iso_week, iso_year, db)
            if winner is None:
                raise ConflictError(f"Could not provision week {iso_week}/{iso_year}")
            return ProvisionResult(winner, PlanService.list_activities(winner.id, db), False)
        except SQLAlchemyError as exc:
            db.rollback()
            log.error("Provisioning week %s/%s failed: %s", iso_week, iso_year, exc, exc_info=True)
            raise PersistenceError("provision weekly plan") from exc

        db.refresh(plan)
        activities = PlanService.list_activities(plan.id, db)
        log.info(
            "Provisioned plan %s for project %s week %s/%s with %s activities",
            plan.id, project_id, iso_week, iso_year, len(activities),
        )
        return ProvisionResult(plan, activities, True)

    @staticmethod
    def update_plan_details(
        plan_id: UUID,
        db: Session,
        responsible: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> WeeklyPlan:
        """Update the plan header. Fields left as None are untouched; a blank string clears them."""
        plan = PlanService.get_plan(plan_id, db)
        if plan.status == PlanStatus.COMPLETED:
            raise ConflictError("Plan is COMPLETED; its details are closed")

        if responsible is not None:
            setattr(plan, "responsible", responsible.strip() or None)
        if notes is not None:
            setattr(plan, "notes", notes.strip() or None)

        commit_or_abort(db, "update weekly plan")
        db.refresh(plan)
        return plan

    # ---- structural edits (PLANNED only) ----

    @staticmethod
    def ensure_editable(plan: WeeklyPlan) -> None:
        if not plan.is_structurally_editable:
            raise ConflictError(
                f"Plan is {plan.status_value}; activities can only be changed while PLANNED"
            )

    @staticmethod
    def _next_display_order(plan_id: UUID, db: Session) -> int:
        activities = PlanService.list_activities(plan_id, db)
        return max((int(a.display_order or 0) for a in activities), default=-1) + 1

    @staticmethod
    def add_activity(
        plan_id: UUID,
        name: str,
        db: Session,
        code: Optional[str] = None,
        area: Optional[str] = None,
        unit: str = "un",
        responsible: Optional[str] = None,
        planned_qty: Optional[Sequence[float]] = None,
        notes: Optional[str] = None,
    ) -> PlannedActivity:
        plan = PlanService.get_plan(plan_id, db)
        PlanService.ensure_editable(plan)
        if not name or not name.strip():
            raise ValidationError("Activity name is required")

        activity = PlannedActivity(
            plan_id=plan.id,
            code=code,
            name=name.strip(),
            area=area,
            unit=unit or "un",
            responsible=responsible,
            has_constraint=False,
            actual_qty=empty_week(),
            activity_ppc=0.0,
            status=ActivityStatus.PENDING,
            display_order=PlanService._next_display_order(plan.id, db),
            notes=notes,
        )
        activity.set_planned(PlanService._validated_quantities(planned_qty or empty_week()))
        db.add(activity)
        commit_or_abort(db, "add planned activity")
        db.refresh(activity)
        return activity

    @staticmethod
    def pull_activity_forward(plan_id: UUID, schedule_activity_id: UUID, db: Session) -> PlannedActivity:
        """Attach a schedule activity from outside the week's window (work pulled forward)."""
        plan = PlanService.get_plan(plan_id, db)
        PlanService.ensure_editable(plan)

        available = ActivitySelector.select_available_activities(
            plan.project_id, db, plan_id=plan.id, company_id=plan.company_id
        )
        candidate = next((c for c in available if c.id == schedule_activity_id), None)
        if candidate is None:
            already_attached = db.query(PlannedActivity).filter(
                PlannedActivity.plan_id == plan.id,
                PlannedActivity.schedule_activity_id == schedule_activity_id,
            ).first()
            if already_attached:
                raise ConflictError("Schedule activity is already on this plan")
            raise NotFoundError("Available schedule activity", schedule_activity_id)

        activity = _activity_from_candidate(candidate, PlanService._next_display_order(plan.id, db))
        activity.plan_id = plan.id
        db.add(activity)
        commit_or_abort(db, "pull activity forward")
        db.refresh(activity)
        return activity

    @staticmethod
    def _validated_quantities(values: Sequence[float]) -> List[float]:
        try:
            slots = [float(v) for v in values]
        except (TypeError, ValueError) as exc:
            raise ValidationError("Quantities must be numbers") from exc
        if len(slots) != len(empty_week()):
            raise ValidationError("Exactly 7 daily quantities are required")
        if any(not math.isfinite(v) or v < 0 for v in slots):
            raise ValidationError("Quantities must be finite numbers >= 0")
        return slots

    @staticmethod
    def update_planned_quantities(activity_id: UUID, planned_qty: Sequence[float], db: Session) -> PlannedActivity:
        activity = PlanService.get_activity(activity_id, db)
        PlanService.ensure_editable(activity.plan)
        activity.set_planned(PlanService._validated_quantities(planned_qty))
        commit_or_abort(db, "update planned quantities")
        db.refresh(activity)
        return activity

    @staticmethod
    def remove_activity(activity_id: UUID, db: Session) -> None:
        activity = PlanService.get_activity(activity_id, db)
        PlanService.ensure_editable(activity.plan)
        db.delete(activity)
        commit_or_abort(db, "remove planned activity")

    # ---- serialization ----

    @staticmethod
    def serialize_activity(activity: PlannedActivity) -> dict:
        return {
            "id": activity.id,
            "plan_id": activity.plan_id,
            "schedule_activity_id": activity.schedule_activity_id,
            "code": activity.code,
            "name": activity.name,
            "area": activity.area,
            "unit": activity.unit,
            "responsible": activity.responsible,
            "has_constraint": bool(activity.has_constraint),
            "constraint_id": activity.constraint_id,
            "constraint_description": activity.constraint_description,
            "planned_qty": activity.planned_week,
            "actual_qty": activity.actual_week,
            "total_planned": activity.total_planned,
            "total_actual": activity.total_actual,
            "activity_ppc": float(activity.activity_ppc or 0),
            "status": activity.status_value,
            "display_order": int(activity.display_order or 0),
        }

    @staticmethod
    def serialize_plan(plan: WeeklyPlan) -> dict:
        return {
            "id": plan.id,
            "company_id": plan.company_id,
            "project_id": plan.project_id,
            "iso_week": plan.iso_week,
            "iso_year": plan.iso_year,
            "start_date": plan.start_date,
            "end_date": plan.end_date,
            "status": plan.status_value,
            "weekly_ppc": float(plan.weekly_ppc or 0),
            "total_activities": int(plan.total_activities or 0),
            "completed_activities": int(plan.completed_activities or 0),
            "activities_with_constraint": int(plan.activities_with_constraint or 0),
            "responsible": plan.responsible,
            "notes": plan.notes,
            "created_at": plan.created_at,
            "updated_at": plan.updated_at,
        }

    @staticmethod
    def serialize_detail(plan: WeeklyPlan, activities: List[PlannedActivity], is_new: bool = False) -> dict:
        return {
            "plan": PlanService.serialize_plan(plan),
            "activities": [PlanService.serialize_activity(a) for a in activities],
            "is_new": is_new,
            "available_events": [e.value for e in plan.get_available_events()],
        }
