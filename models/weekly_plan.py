"""
Weekly work plan model with its acceptance lifecycle.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import List, cast

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from core.database import Base


class PlanStatus(PyEnum):
    PLANNED = "PLANNED"
    AWAITING_ACCEPTANCE = "AWAITING_ACCEPTANCE"
    ACCEPTED = "ACCEPTED"
    IN_EXECUTION = "IN_EXECUTION"
    COMPLETED = "COMPLETED"


class AcceptanceEventType(PyEnum):
    SUBMIT_TO_PRODUCTION = "SUBMIT_TO_PRODUCTION"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    RETURN_TO_PLANNING = "RETURN_TO_PLANNING"
    START_EXECUTION = "START_EXECUTION"
    COMPLETE = "COMPLETE"


# event type -> (statuses it may fire from, resulting status)
PLAN_TRANSITIONS = {
    AcceptanceEventType.SUBMIT_TO_PRODUCTION: (
        [PlanStatus.PLANNED],
        PlanStatus.AWAITING_ACCEPTANCE,
    ),
    AcceptanceEventType.ACCEPT: (
        [PlanStatus.AWAITING_ACCEPTANCE],
        PlanStatus.ACCEPTED,
    ),
    AcceptanceEventType.REJECT: (
        [PlanStatus.AWAITING_ACCEPTANCE],
        PlanStatus.PLANNED,
    ),
    AcceptanceEventType.RETURN_TO_PLANNING: (
        [PlanStatus.AWAITING_ACCEPTANCE],
        PlanStatus.PLANNED,
    ),
    AcceptanceEventType.START_EXECUTION: (
        [PlanStatus.PLANNED, PlanStatus.ACCEPTED],
        PlanStatus.IN_EXECUTION,
    ),
    AcceptanceEventType.COMPLETE: (
        [PlanStatus.IN_EXECUTION],
        PlanStatus.COMPLETED,
    ),
}


class WeeklyPlan(Base):
    """
    One short-interval work plan per (company, project, ISO week).

    Status is a cache of the acceptance event log and is only written through
    `apply_event`; the rollup columns are only written by the PPC calculator.
    """
    __tablename__ = "weekly_plans"

    __table_args__ = (
        UniqueConstraint("company_id", "project_id", "iso_week", "iso_year", name="uq_weekly_plan_week"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    company_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    project_id = Column(UUID(as_uuid=True), nullable=False, index=True)

    iso_week = Column(Integer, nullable=False)
    iso_year = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    status = Column(
        Enum(PlanStatus, native_enum=False),
        nullable=False,
        default=PlanStatus.PLANNED,
    )

    # Rollups written back by the PPC calculator
    weekly_ppc = Column(Float, nullable=False, default=0.0)
    total_activities = Column(Integer, nullable=False, default=0)
    completed_activities = Column(Integer, nullable=False, default=0)
    activities_with_constraint = Column(Integer, nullable=False, default=0)

    responsible = Column(String(160), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    activities = relationship(
        "PlannedActivity",
        back_populates="plan",
        order_by="PlannedActivity.display_order",
        cascade="all, delete-orphan",
    )
    events = relationship(
        "AcceptanceEvent",
        back_populates="plan",
        order_by="AcceptanceEvent.sequence",
    )

    @property
    def status_value(self) -> str:
        return self.status.value if hasattr(self.status, "value") else str(self.status)

    def can_apply(self, event_type: AcceptanceEventType) -> bool:
        allowed_from, _ = PLAN_TRANSITIONS[event_type]
        return cast(PlanStatus, self.status) in allowed_from

    def apply_event(self, event_type: AcceptanceEventType) -> PlanStatus:
        """Move to the status `event_type` leads to; ValueError when illegal from here."""
        current_status = cast(PlanStatus, self.status)
        allowed_from, target = PLAN_TRANSITIONS[event_type]
        if current_status not in allowed_from:
            raise ValueError(
                f"Cannot apply {event_type.value} while plan is {current_status.value}. "
                f"Allowed from: {[s.value for s in allowed_from]}"
            )
        self.status = target
        return target

    def get_available_events(self) -> List[AcceptanceEventType]:
        return [event_type for event_type in PLAN_TRANSITIONS if self.can_apply(event_type)]

    @property
    def is_structurally_editable(self) -> bool:
        return cast(PlanStatus, self.status) == PlanStatus.PLANNED

    def __repr__(self) -> str:
        return (
            f"<WeeklyPlan(id={self.id}, project_id={self.project_id}, "
            f"week={self.iso_week}/{self.iso_year}, status={self.status_value})>"
        )
