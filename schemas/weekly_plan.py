from datetime import date, datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from models.enums import DAYS_IN_WEEK


def _check_week_slots(values: list[float]) -> list[float]:
    if len(values) != DAYS_IN_WEEK:
        raise ValueError(f"Exactly {DAYS_IN_WEEK} daily quantities are required (Mon..Sun)")
    if any(v < 0 for v in values):
        raise ValueError("Quantities must be >= 0")
    return values


FiniteQuantity = Annotated[float, Field(allow_inf_nan=False)]
WeekQuantities = Annotated[list[FiniteQuantity], AfterValidator(_check_week_slots)]


class WeekWindowResponse(BaseModel):
    iso_week: int
    iso_year: int
    start: date
    end: date
    label: str


class PlanProvisionRequest(BaseModel):
    project_id: UUID
    company_id: Optional[UUID] = None
    reference_date: Optional[date] = None
    iso_week: Optional[int] = Field(default=None, ge=1, le=53)
    iso_year: Optional[int] = None
    responsible: Optional[str] = Field(default=None, max_length=160)


class PlannedActivityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: Optional[str] = Field(default=None, max_length=60)
    area: Optional[str] = Field(default=None, max_length=120)
    unit: str = Field(default="un", max_length=20)
    responsible: Optional[str] = Field(default=None, max_length=160)
    planned_qty: WeekQuantities = Field(default_factory=lambda: [0.0] * DAYS_IN_WEEK)
    notes: Optional[str] = None


class PlanDetailsUpdate(BaseModel):
    responsible: Optional[str] = Field(default=None, max_length=160)
    notes: Optional[str] = Field(default=None, max_length=4000)


class PullForwardRequest(BaseModel):
    schedule_activity_id: UUID


class PlannedQuantitiesUpdate(BaseModel):
    planned_qty: WeekQuantities


class PlannedActivityResponse(BaseModel):
    id: UUID
    plan_id: UUID
    schedule_activity_id: Optional[UUID] = None
    code: Optional[str] = None
    name: str
    area: Optional[str] = None
    unit: str
    responsible: Optional[str] = None
    has_constraint: bool
    constraint_id: Optional[UUID] = None
    constraint_description: Optional[str] = None
    planned_qty: list[float]
    actual_qty: list[float]
    total_planned: float
    total_actual: float
    activity_ppc: float
    status: str
    display_order: int


class WeeklyPlanResponse(BaseModel):
    id: UUID
    company_id: UUID
    project_id: UUID
    iso_week: int
    iso_year: int
    start_date: date
    end_date: date
    status: str
    weekly_ppc: float
    total_activities: int
    completed_activities: int
    activities_with_constraint: int
    responsible: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class WeeklyPlanDetailResponse(BaseModel):
    plan: WeeklyPlanResponse
    activities: list[PlannedActivityResponse]
    is_new: bool = False
    available_events: list[str] = Field(default_factory=list)
