"""
Selects master-schedule activities that can be committed in a weekly plan.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from models.planned_activity import PlannedActivity
from schemas.schedule import ActivityCandidate, ScheduleActivityView
from services.constraint_service import ConstraintService
from services.quantity_service import QuantityService
from services.schedule_service import ScheduleService
from services.week_service import days_between


def activity_duration(activity: ScheduleActivityView) -> int:
    """Explicit duration when present, else the inclusive day span; never below 1."""
    if activity.duration_days:
        return max(1, int(activity.duration_days))
    if activity.start and activity.end:
        return max(1, days_between(activity.end, activity.start) + 1)
    return 1


class ActivitySelector:
    @staticmethod
    def _build_candidates(
        activities: List[ScheduleActivityView],
        db: Session,
        company_id: Optional[UUID] = None,
    ) -> List[ActivityCandidate]:
        constraints = ConstraintService.open_constraints_by_activity(
            [a.id for a in activities], db, company_id=company_id
        )

        candidates: List[ActivityCandidate] = []
        for activity in activities:
            duration = activity_duration(activity)
            constraint = constraints.get(activity.id)
            candidates.append(
                ActivityCandidate(
                    id=activity.id,
                    code=activity.code,
                    name=activity.name,
                    responsible=activity.responsible,
                    start=activity.start,
                    end=activity.end,
                    duration_days=duration,
                    has_constraint=constraint is not None,
                    constraint_id=constraint.id if constraint else None,
                    constraint_description=constraint.description if constraint else None,
                    quantity_targets=QuantityService.targets_for_activity(activity.id, duration, db),
                )
            )
        return candidates

    @staticmethod
    def select_activities_for_week(
        project_id: UUID,
        window_start: date,
        window_end: date,
        db: Session,
        company_id: Optional[UUID] = None,
    ) -> List[ActivityCandidate]:
        """Candidates whose [start, end] overlaps the window, in schedule order."""
        activities = ScheduleService.find_activities(
            project_id,
            db,
            window_start=window_start,
            window_end=window_end,
            company_id=company_id,
        )
        return ActivitySelector._build_candidates(activities, db, company_id=company_id)

    @staticmethod
    def select_available_activities(
        project_id: UUID,
        db: Session,
        plan_id: Optional[UUID] = None,
        company_id: Optional[UUID] = None,
    ) -> List[ActivityCandidate]:
        """All open candidates of the project, minus those already on `plan_id`."""
        attached: List[UUID] = []
        if plan_id is not None:
            attached = [
                row.schedule_activity_id
                for row in db.query(PlannedActivity.schedule_activity_id).filter(
                    PlannedActivity.plan_id == plan_id,
                    PlannedActivity.schedule_activity_id.isnot(None),
                )
            ]
        activities = ScheduleService.find_activities(
            project_id, db, exclude_ids=attached, company_id=company_id
        )
        return ActivitySelector._build_candidates(activities, db, company_id=company_id)
