"""
Planned activity model: one committed line of a weekly plan.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import List, Optional, Sequence

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from core.database import Base
from models.enums import DAYS_IN_WEEK, Weekday


class ActivityStatus(PyEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    NOT_COMPLETED = "NOT_COMPLETED"


def empty_week() -> List[float]:
    return [0.0] * DAYS_IN_WEEK


def normalize_week(values: Optional[Sequence[float]]) -> List[float]:
    """Coerce a stored slot array into exactly seven floats (missing or null slots read as 0)."""
    slots = [float(v or 0) for v in list(values or [])[:DAYS_IN_WEEK]]
    return slots + [0.0] * (DAYS_IN_WEEK - len(slots))


class PlannedActivity(Base):
    """
    Planned and actual quantities are stored as seven-slot arrays indexed by
    `Weekday`. Always assign a new list to a slot column so the change is
    flushed; use `set_planned` / `set_actual`.
    """
    __tablename__ = "planned_activities"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    plan_id = Column(
        UUID(as_uuid=True),
        ForeignKey("weekly_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    schedule_activity_id = Column(UUID(as_uuid=True), nullable=True, index=True)

    code = Column(String(60), nullable=True)
    name = Column(String(255), nullable=False)
    area = Column(String(120), nullable=True)
    unit = Column(String(20), nullable=False, default="un")
    responsible = Column(String(160), nullable=True)

    has_constraint = Column(Boolean, nullable=False, default=False)
    constraint_id = Column(UUID(as_uuid=True), nullable=True)
    constraint_description = Column(Text, nullable=True)

    planned_qty = Column(JSON, nullable=False, default=empty_week)
    actual_qty = Column(JSON, nullable=False, default=empty_week)

    activity_ppc = Column(Float, nullable=False, default=0.0)
    status = Column(
        Enum(ActivityStatus, native_enum=False),
        nullable=False,
        default=ActivityStatus.PENDING,
    )
    display_order = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    plan = relationship("WeeklyPlan", back_populates="activities")
    check_records = relationship(
        "DailyCheckRecord",
        back_populates="activity",
        cascade="all, delete-orphan",
    )

    @property
    def planned_week(self) -> List[float]:
        return normalize_week(self.planned_qty)

    @property
    def actual_week(self) -> List[float]:
        return normalize_week(self.actual_qty)

    def planned_for(self, day: Weekday) -> float:
        return self.planned_week[int(day)]

    def actual_for(self, day: Weekday) -> float:
        return self.actual_week[int(day)]

    def set_planned(self, values: Sequence[float]) -> None:
        self.planned_qty = normalize_week(values)

    def set_actual(self, day: Weekday, qty: float) -> None:
        slots = self.actual_week
        slots[int(day)] = float(qty)
        self.actual_qty = slots

    @property
    def total_planned(self) -> float:
        return sum(self.planned_week)

    @property
    def total_actual(self) -> float:
        return sum(self.actual_week)

    @property
    def status_value(self) -> str:
        return self.status.value if hasattr(self.status, "value") else str(self.status)

    def __repr__(self) -> str:
        return f"<PlannedActivity(id={self.id}, code={self.code}, name={self.name})>"
