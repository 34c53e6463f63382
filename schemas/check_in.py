from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from models.enums import CauseCategory, Weekday


class CheckInRequest(BaseModel):
    activity_id: UUID
    check_date: date
    weekday: Optional[Weekday] = None
    actual_qty: float = Field(..., ge=0, allow_inf_nan=False)
    cause: Optional[CauseCategory] = None
    cause_description: Optional[str] = Field(default=None, max_length=2000)
    notes: Optional[str] = Field(default=None, max_length=2000)


class DailyCheckResponse(BaseModel):
    id: UUID
    activity_id: UUID
    check_date: date
    weekday: int
    planned_qty: float
    actual_qty: float
    completed: bool
    cause: Optional[CauseCategory] = None
    cause_description: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
    recorded_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CheckInResponse(BaseModel):
    committed: bool
    cause_required: bool
    planned_qty: float
    completed: bool
    record: Optional[DailyCheckResponse] = None


class PPCMetricsResponse(BaseModel):
    weekly_ppc: float
    ppc_by_day: dict[str, float]
    total_activities: int
    completed_activities: int
    not_completed_activities: int
    activities_with_constraint: int
    cause_histogram: dict[str, int]
