from datetime import datetime
from enum import Enum as PyEnum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from core.database import Base


class InterferenceStatus(PyEnum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"
    CONVERTED = "CONVERTED"


class CompanyType(PyEnum):
    CONTRACTOR = "CONTRACTOR"
    CLIENT = "CLIENT"
    INSPECTION = "INSPECTION"


class InterferenceCategory(PyEnum):
    MATERIAL = "MATERIAL"
    LABOR = "LABOR"
    MACHINE = "MACHINE"
    METHOD = "METHOD"
    ENVIRONMENT = "ENVIRONMENT"
    MEASUREMENT = "MEASUREMENT"
    SAFETY = "SAFETY"
    DESIGN = "DESIGN"
    WEATHER = "WEATHER"
    OTHER = "OTHER"


class FieldInterference(Base):
    __tablename__ = "field_interferences"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    project_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    plan_id = Column(UUID(as_uuid=True), ForeignKey("weekly_plans.id"), nullable=True, index=True)
    activity_id = Column(UUID(as_uuid=True), ForeignKey("planned_activities.id", ondelete="SET NULL"), nullable=True)
    activity_code = Column(String(60), nullable=True)
    activity_name = Column(String(255), nullable=True)

    reporter_id = Column(UUID(as_uuid=True), nullable=True)
    reporter_name = Column(String(160), nullable=False)
    sector = Column(String(120), nullable=True)
    company_involved = Column(String(160), nullable=False)
    company_type = Column(Enum(CompanyType, native_enum=False), nullable=False)
    category = Column(Enum(InterferenceCategory, native_enum=False), nullable=True)

    description = Column(Text, nullable=False)
    impact = Column(Text, nullable=True)
    action_taken = Column(Text, nullable=True)

    occurred_at = Column(DateTime(timezone=True), nullable=False)
    recorded_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    status = Column(Enum(InterferenceStatus, native_enum=False), nullable=False, default=InterferenceStatus.OPEN)
    # Set once, on promotion; CONVERTED is terminal
    converted_constraint_id = Column(UUID(as_uuid=True), nullable=True)

    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
