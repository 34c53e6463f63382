"""
Read access to the master schedule.
"""
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from models.schedule import ScheduleActivity, ScheduleActivityStatus, ScheduleActivityType
from schemas.schedule import ScheduleActivityView

EXCLUDED_TYPES = [ScheduleActivityType.MILESTONE, ScheduleActivityType.SUMMARY]


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def to_view(row: ScheduleActivity) -> ScheduleActivityView:
    return ScheduleActivityView(
        id=row.id,
        code=row.code,
        name=row.name,
        responsible=row.responsible,
        start=row.start_date,
        end=row.end_date,
        duration_days=row.duration_days,
        progress=float(row.progress or 0),
        status=_enum_value(row.status),
        type=_enum_value(row.type),
    )


class ScheduleService:
    @staticmethod
    def get_activity(activity_id: UUID, db: Session) -> Optional[ScheduleActivityView]:
        row = db.query(ScheduleActivity).filter(ScheduleActivity.id == activity_id).first()
        return to_view(row) if row else None

    @staticmethod
    def find_activities(
        project_id: UUID,
        db: Session,
        window_start: Optional[date] = None,
        window_end: Optional[date] = None,
        exclude_ids: Iterable[UUID] = (),
        company_id: Optional[UUID] = None,
    ) -> List[ScheduleActivityView]:
        """
        Workable schedule activities of a project, optionally restricted to
        those overlapping [window_start, window_end] and to one company.
        """
        query = db.query(ScheduleActivity).filter(
            ScheduleActivity.project_id == project_id,
            ScheduleActivity.type.notin_(EXCLUDED_TYPES),
        )
        if company_id is not None:
            query = query.filter(ScheduleActivity.company_id == company_id)
        if window_end is not None:
            query = query.filter(ScheduleActivity.start_date <= window_end)
        if window_start is not None:
            query = query.filter(ScheduleActivity.end_date >= window_start)

        excluded = list(exclude_ids)
        if excluded:
            query = query.filter(ScheduleActivity.id.notin_(excluded))

        rows = query.order_by(ScheduleActivity.start_date.asc(), ScheduleActivity.code.asc()).all()
        return [
            to_view(row) for row in rows
            if float(row.progress or 0) < 100 and row.status != ScheduleActivityStatus.COMPLETED
        ]
