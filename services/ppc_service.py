"""
Percent Plan Complete (PPC) metrics for a weekly plan.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from core.database import commit_or_abort
from core.numbers import percent
from models.enums import CauseCategory, Weekday
from models.planned_activity import ActivityStatus, PlannedActivity
from models.weekly_plan import PlanStatus
from services.check_in_service import CheckInService
from services.plan_service import PlanService

log = logging.getLogger(__name__)


@dataclass
class ActivityTotals:
    total_planned: float
    total_actual: float
    days_planned: int
    days_met: int

    @property
    def has_planned_work(self) -> bool:
        return self.total_planned > 0

    @property
    def completed(self) -> bool:
        return self.total_planned > 0 and self.total_actual >= self.total_planned

    @property
    def ppc(self) -> float:
        return percent(self.days_met, self.days_planned)


@dataclass
class PPCMetrics:
    weekly_ppc: float = 0.0
    ppc_by_day: Dict[Weekday, float] = field(default_factory=lambda: {day: 0.0 for day in Weekday})
    total_activities: int = 0
    completed_activities: int = 0
    not_completed_activities: int = 0
    activities_with_constraint: int = 0
    cause_histogram: Dict[CauseCategory, int] = field(default_factory=lambda: {cause: 0 for cause in CauseCategory})

    def to_dict(self) -> dict:
        return {
            "weekly_ppc": self.weekly_ppc,
            "ppc_by_day": {day.name: value for day, value in self.ppc_by_day.items()},
            "total_activities": self.total_activities,
            "completed_activities": self.completed_activities,
            "not_completed_activities": self.not_completed_activities,
            "activities_with_constraint": self.activities_with_constraint,
            "cause_histogram": {cause.value: count for cause, count in self.cause_histogram.items()},
        }


def activity_totals(planned: Sequence[float], actual: Sequence[float]) -> ActivityTotals:
    days_planned = 0
    days_met = 0
    for day in Weekday:
        p = float(planned[day])
        if p > 0:
            days_planned += 1
            if float(actual[day]) >= p:
                days_met += 1
    return ActivityTotals(
        total_planned=float(sum(planned)),
        total_actual=float(sum(actual)),
        days_planned=days_planned,
        days_met=days_met,
    )


def compute_metrics(activities: Iterable[PlannedActivity], check_records: Iterable) -> PPCMetrics:
    """
    Pure PPC computation over activity and check-record snapshots.

    Per-day PPC only counts activities with planned work that day; weekly PPC
    only counts activities with planned work in the week. Empty input yields
    zero-valued metrics.
    """
    activities = list(activities)
    metrics = PPCMetrics(total_activities=len(activities))

    for day in Weekday:
        with_work = [a for a in activities if a.planned_for(day) > 0]
        met = [a for a in with_work if a.actual_for(day) >= a.planned_for(day)]
        metrics.ppc_by_day[day] = percent(len(met), len(with_work))

    with_planned_work = 0
    for activity in activities:
        if activity.has_constraint:
            metrics.activities_with_constraint += 1
        totals = activity_totals(activity.planned_week, activity.actual_week)
        if not totals.has_planned_work:
            continue
        with_planned_work += 1
        if totals.completed:
            metrics.completed_activities += 1
        else:
            metrics.not_completed_activities += 1

    metrics.weekly_ppc = percent(metrics.completed_activities, with_planned_work)

    for record in check_records:
        if not record.completed and record.cause is not None:
            cause = record.cause if isinstance(record.cause, CauseCategory) else CauseCategory(record.cause)
            metrics.cause_histogram[cause] += 1

    return metrics


def derive_activity_status(totals: ActivityTotals, plan_status: PlanStatus) -> ActivityStatus:
    if totals.completed:
        return ActivityStatus.COMPLETED
    if plan_status == PlanStatus.COMPLETED and totals.has_planned_work:
        return ActivityStatus.NOT_COMPLETED
    if totals.total_actual > 0:
        return ActivityStatus.IN_PROGRESS
    return ActivityStatus.PENDING


class PPCService:
    @staticmethod
    def recompute_metrics(plan_id: UUID, db: Session) -> PPCMetrics:
        """Compute metrics for the plan and write the rollups back onto it."""
        plan = PlanService.get_plan(plan_id, db)
        activities = PlanService.list_activities(plan.id, db)
        records = CheckInService.list_check_ins(plan.id, db)

        metrics = compute_metrics(activities, records)

        for activity in activities:
            totals = activity_totals(activity.planned_week, activity.actual_week)
            activity.activity_ppc = totals.ppc
            activity.status = derive_activity_status(totals, plan.status)

        plan.weekly_ppc = metrics.weekly_ppc
        plan.total_activities = metrics.total_activities
        plan.completed_activities = metrics.completed_activities
        plan.activities_with_constraint = metrics.activities_with_constraint

        commit_or_abort(db, "recompute plan metrics")
        log.info(
            "Plan %s PPC %.2f%% (%s/%s complete)",
            plan.id, metrics.weekly_ppc, metrics.completed_activities, metrics.total_activities,
        )
        return metrics
