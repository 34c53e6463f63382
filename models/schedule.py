"""
Master-schedule activity rows, owned by the scheduling subsystem and only read here.
"""
from datetime import datetime
from enum import Enum as PyEnum
import uuid

from sqlalchemy import Column, Date, DateTime, Enum, Float, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from core.database import Base


class ScheduleActivityType(PyEnum):
    TASK = "TASK"
    MILESTONE = "MILESTONE"
    SUMMARY = "SUMMARY"


class ScheduleActivityStatus(PyEnum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class ScheduleActivity(Base):
    __tablename__ = "schedule_activities"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    project_id = Column(UUID(as_uuid=True), nullable=False, index=True)

    code = Column(String(60), nullable=True)
    name = Column(String(255), nullable=False)
    responsible = Column(String(160), nullable=True)

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    duration_days = Column(Integer, nullable=True)
    progress = Column(Float, nullable=False, default=0.0)

    status = Column(
        Enum(ScheduleActivityStatus, native_enum=False),
        nullable=False,
        default=ScheduleActivityStatus.NOT_STARTED,
    )
    type = Column(
        Enum(ScheduleActivityType, native_enum=False),
        nullable=False,
        default=ScheduleActivityType.TASK,
    )

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
