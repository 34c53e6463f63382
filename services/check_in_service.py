"""
Daily check-in of actual quantities against planned activities.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.database import commit_or_abort
from core.exceptions import ConflictError, PersistenceError, ValidationError
from models.daily_check import DailyCheckRecord
from models.enums import CauseCategory, Weekday
from models.planned_activity import PlannedActivity
from models.weekly_plan import PlanStatus
from services.plan_service import PlanService
from services.week_service import DateLike, parse_date

log = logging.getLogger(__name__)


@dataclass
class CheckInOutcome:
    """
    Result of a check-in attempt. When `cause_required` is set nothing was
    written; the caller must ask for a cause and call again.
    """
    committed: bool
    cause_required: bool
    planned_qty: float
    completed: bool
    record: Optional[DailyCheckRecord] = None


def is_completed(actual_qty: float, planned_qty: float) -> bool:
    return planned_qty > 0 and actual_qty >= planned_qty


class CheckInService:
    @staticmethod
    def _resolve_weekday(check_date: date, weekday: Optional[Weekday]) -> Weekday:
        actual_weekday = Weekday(check_date.weekday())
        if weekday is not None and Weekday(weekday) != actual_weekday:
            raise ValidationError(
                f"{check_date.isoformat()} is a {actual_weekday.name}, not {Weekday(weekday).name}"
            )
        return actual_weekday

    @staticmethod
    def find_record(activity_id: UUID, check_date: date, db: Session) -> Optional[DailyCheckRecord]:
        return db.query(DailyCheckRecord).filter(
            DailyCheckRecord.activity_id == activity_id,
            DailyCheckRecord.check_date == check_date,
        ).first()

    @staticmethod
    def _apply(
        record: DailyCheckRecord,
        activity: PlannedActivity,
        slot: Weekday,
        actual: float,
        completed: bool,
        cause: Optional[CauseCategory],
        cause_description: Optional[str],
        notes: Optional[str],
        recorded_by: Optional[str],
    ) -> None:
        record.actual_qty = actual
        record.completed = completed
        # A cause only explains a shortfall
        record.cause = None if completed else cause
        record.cause_description = None if completed else (cause_description or None)
        record.notes = notes or None
        record.recorded_by = recorded_by
        record.recorded_at = datetime.utcnow()
        activity.set_actual(slot, actual)

    @staticmethod
    def record_check_in(
        activity_id: UUID,
        check_date: DateLike,
        actual_qty: float,
        db: Session,
        weekday: Optional[Weekday] = None,
        cause: Optional[CauseCategory] = None,
        cause_description: Optional[str] = None,
        notes: Optional[str] = None,
        recorded_by: Optional[str] = None,
    ) -> CheckInOutcome:
        """
        Record one day's actual quantity for one activity.

        The record is upserted on (activity, date); its planned snapshot is
        taken on first insert only. The actual is mirrored into the activity's
        daily slot. Plan metrics are not recomputed here.
        """
        if actual_qty is None:
            raise ValidationError("Actual quantity is required")
        try:
            actual = float(actual_qty)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Actual quantity must be a number") from exc
        if not math.isfinite(actual) or actual < 0:
            raise ValidationError("Actual quantity must be a finite number >= 0")

        day = parse_date(check_date)
        slot = CheckInService._resolve_weekday(day, weekday)

        activity = PlanService.get_activity(activity_id, db)
        plan = activity.plan
        if plan.status == PlanStatus.COMPLETED:
            raise ConflictError("Plan is COMPLETED; check-ins are closed")
        if not (plan.start_date <= day <= plan.end_date):
            raise ValidationError(
                f"{day.isoformat()} is outside the plan window "
                f"{plan.start_date.isoformat()}..{plan.end_date.isoformat()}"
            )

        planned = activity.planned_for(slot)
        completed = is_completed(actual, planned)

        if not completed and planned > 0 and cause is None:
            return CheckInOutcome(
                committed=False,
                cause_required=True,
                planned_qty=planned,
                completed=False,
            )

        fields = (slot, actual, completed, cause, cause_description, notes, recorded_by)
        record = CheckInService.find_record(activity.id, day, db)

        if record is not None:
            CheckInService._apply(record, activity, *fields)
            commit_or_abort(db, "record check-in")
        else:
            record = DailyCheckRecord(
                activity_id=activity.id,
                check_date=day,
                weekday=int(slot),
                planned_qty=planned,
            )
            db.add(record)
            CheckInService._apply(record, activity, *fields)
            try:
                db.commit()
            except IntegrityError:
                # Another writer inserted the same (activity, date) first; last write wins
                db.rollback()
                log.warning(
                    "Check-in for activity %s on %s created concurrently; updating it",
                    activity.id, day.isoformat(),
                )
                record = CheckInService.find_record(activity.id, day, db)
                if record is None:
                    raise ConflictError(f"Could not record check-in for {day.isoformat()}")
                CheckInService._apply(record, activity, *fields)
                commit_or_abort(db, "record check-in")
            except SQLAlchemyError as exc:
                db.rollback()
                log.error("Recording check-in on %s failed: %s", day.isoformat(), exc, exc_info=True)
                raise PersistenceError("record check-in") from exc

        db.refresh(record)
        log.info(
            "Check-in %s for activity %s on %s: %s/%s",
            "met" if completed else "missed", activity.id, day.isoformat(), actual, planned,
        )
        return CheckInOutcome(
            committed=True,
            cause_required=False,
            planned_qty=float(record.planned_qty or 0),
            completed=completed,
            record=record,
        )

    @staticmethod
    def list_check_ins(plan_id: UUID, db: Session) -> List[DailyCheckRecord]:
        return (
            db.query(DailyCheckRecord)
            .join(PlannedActivity, PlannedActivity.id == DailyCheckRecord.activity_id)
            .filter(PlannedActivity.plan_id == plan_id)
            .order_by(DailyCheckRecord.check_date.asc())
            .all()
        )
