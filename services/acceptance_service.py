"""
Planning / production acceptance lifecycle of a weekly plan.

Every status change appends an AcceptanceEvent in the same commit; the event
log is the authoritative history and `WeeklyPlan.status` is its cache.
"""
import logging
from typing import List, Optional, cast
from uuid import UUID

from sqlalchemy.orm import Session

from core.database import commit_or_abort
from core.exceptions import ConflictError, ValidationError
from models.acceptance_event import AcceptanceEvent
from models.weekly_plan import PLAN_TRANSITIONS, AcceptanceEventType, PlanStatus, WeeklyPlan
from services.plan_service import PlanService
from services.ppc_service import PPCService

log = logging.getLogger(__name__)

NOTES_REQUIRED = {AcceptanceEventType.REJECT, AcceptanceEventType.RETURN_TO_PLANNING}


def _actor_fields(actor) -> dict:
    name = getattr(actor, "username", None) or getattr(actor, "email", None) or "system"
    sector = getattr(actor, "sector", None) or "Not informed"
    return {
        "actor_id": getattr(actor, "id", None),
        "actor_name": str(name),
        "sector": str(sector),
    }


class AcceptanceService:
    @staticmethod
    def list_events(plan_id: UUID, db: Session) -> List[AcceptanceEvent]:
        return (
            db.query(AcceptanceEvent)
            .filter(AcceptanceEvent.plan_id == plan_id)
            .order_by(AcceptanceEvent.sequence.asc())
            .all()
        )

    @staticmethod
    def transition(
        plan_id: UUID,
        event_type: AcceptanceEventType,
        actor,
        db: Session,
        notes: Optional[str] = None,
    ) -> WeeklyPlan:
        plan = PlanService.get_plan(plan_id, db)
        current_status = cast(PlanStatus, plan.status)

        if not plan.can_apply(event_type):
            allowed_from, _ = PLAN_TRANSITIONS[event_type]
            raise ConflictError(
                f"Cannot {event_type.value} while plan is {current_status.value}",
                details={
                    "current_status": current_status.value,
                    "allowed_from": [s.value for s in allowed_from],
                },
            )

        clean_notes = (notes or "").strip() or None
        if event_type in NOTES_REQUIRED and not clean_notes:
            raise ValidationError(f"Notes are required to {event_type.value}")

        if event_type == AcceptanceEventType.START_EXECUTION and int(plan.total_activities or 0) <= 0:
            raise ConflictError("Cannot start execution of a plan without activities")

        sequence = db.query(AcceptanceEvent).filter(AcceptanceEvent.plan_id == plan.id).count() + 1
        target = plan.apply_event(event_type)
        db.add(
            AcceptanceEvent(
                plan_id=plan.id,
                sequence=sequence,
                event_type=event_type,
                from_status=current_status,
                to_status=target,
                notes=clean_notes,
                **_actor_fields(actor),
            )
        )
        commit_or_abort(db, f"{event_type.value.lower()} plan")
        db.refresh(plan)
        log.info("Plan %s: %s -> %s (%s)", plan.id, current_status.value, target.value, event_type.value)
        return plan

    @staticmethod
    def submit_for_acceptance(plan_id: UUID, actor, db: Session, notes: Optional[str] = None) -> WeeklyPlan:
        return AcceptanceService.transition(plan_id, AcceptanceEventType.SUBMIT_TO_PRODUCTION, actor, db, notes)

    @staticmethod
    def accept(plan_id: UUID, actor, db: Session, notes: Optional[str] = None) -> WeeklyPlan:
        return AcceptanceService.transition(plan_id, AcceptanceEventType.ACCEPT, actor, db, notes)

    @staticmethod
    def reject(plan_id: UUID, actor, db: Session, notes: Optional[str] = None) -> WeeklyPlan:
        return AcceptanceService.transition(plan_id, AcceptanceEventType.REJECT, actor, db, notes)

    @staticmethod
    def return_to_planning(plan_id: UUID, actor, db: Session, notes: Optional[str] = None) -> WeeklyPlan:
        return AcceptanceService.transition(plan_id, AcceptanceEventType.RETURN_TO_PLANNING, actor, db, notes)

    @staticmethod
    def start_execution(plan_id: UUID, actor, db: Session, notes: Optional[str] = None) -> WeeklyPlan:
        # Refresh total_activities before the guard reads it
        PPCService.recompute_metrics(plan_id, db)
        return AcceptanceService.transition(plan_id, AcceptanceEventType.START_EXECUTION, actor, db, notes)

    @staticmethod
    def complete_execution(plan_id: UUID, actor, db: Session, notes: Optional[str] = None) -> WeeklyPlan:
        plan = AcceptanceService.transition(plan_id, AcceptanceEventType.COMPLETE, actor, db, notes)
        # Final rollup marks unmet activities NOT_COMPLETED
        PPCService.recompute_metrics(plan.id, db)
        db.refresh(plan)
        return plan

    @staticmethod
    def can_edit_structure(plan: WeeklyPlan) -> bool:
        """Activities may only be added, changed or removed while the plan is PLANNED."""
        return plan.is_structurally_editable

    @staticmethod
    def replay_status(plan_id: UUID, db: Session) -> PlanStatus:
        """Derive the plan status from its event log alone."""
        status = PlanStatus.PLANNED
        for event in AcceptanceService.list_events(plan_id, db):
            status = cast(PlanStatus, event.to_status)
        return status

    @staticmethod
    def rebuild_status(plan_id: UUID, db: Session) -> WeeklyPlan:
        """Overwrite the cached status with the one replayed from the log."""
        plan = PlanService.get_plan(plan_id, db)
        replayed = AcceptanceService.replay_status(plan.id, db)
        if plan.status != replayed:
            log.warning("Plan %s status cache %s disagreed with log %s", plan.id, plan.status_value, replayed.value)
            plan.status = replayed
            commit_or_abort(db, "rebuild plan status")
            db.refresh(plan)
        return plan

    @staticmethod
    def serialize_event(event: AcceptanceEvent) -> dict:
        return {
            "id": event.id,
            "plan_id": event.plan_id,
            "actor_id": event.actor_id,
            "actor_name": event.actor_name,
            "sector": event.sector,
            "event_type": event.event_type.value,
            "from_status": event.from_status.value,
            "to_status": event.to_status.value,
            "notes": event.notes,
            "created_at": event.created_at,
        }
