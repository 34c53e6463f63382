"""
Validated projections of rows owned by neighbouring subsystems
(master schedule, constraint management, quantity takeoff).
"""
from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ScheduleActivityView(BaseModel):
    id: UUID
    code: Optional[str] = None
    name: str
    responsible: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None
    duration_days: Optional[int] = None
    progress: float = 0.0
    status: str
    type: str


class OpenConstraintView(BaseModel):
    id: UUID
    activity_id: UUID
    description: str


class QuantityLinkView(BaseModel):
    link_id: UUID
    item_id: UUID
    description: str = "Item without description"
    unit: str = "un"
    total_qty: float = Field(default=0.0, ge=0)
    weight: float = 1.0


class LinkedQuantityTarget(BaseModel):
    link_id: UUID
    item_id: UUID
    description: str
    unit: str
    total_qty: float
    daily_target: float
    weight: float


class ActivityCandidate(BaseModel):
    """A schedule activity offered for inclusion in a weekly plan."""
    id: UUID
    code: Optional[str] = None
    name: str
    responsible: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None
    duration_days: int = Field(..., ge=1)
    has_constraint: bool = False
    constraint_id: Optional[UUID] = None
    constraint_description: Optional[str] = None
    quantity_targets: list[LinkedQuantityTarget] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
