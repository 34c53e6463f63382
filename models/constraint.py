from datetime import datetime
from enum import Enum as PyEnum
import uuid

from sqlalchemy import Column, DateTime, Enum, String, Text
from sqlalchemy.dialects.postgresql import UUID

from core.database import Base


class ConstraintStatus(PyEnum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"


UNRESOLVED_CONSTRAINT_STATUSES = [ConstraintStatus.OPEN, ConstraintStatus.IN_PROGRESS]


class Constraint(Base):
    """Blocking condition on a schedule activity, owned by constraint management."""
    __tablename__ = "constraints"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    project_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    activity_id = Column(UUID(as_uuid=True), nullable=True, index=True)

    description = Column(Text, nullable=False)
    category = Column(String(40), nullable=True)
    responsible = Column(String(160), nullable=True)
    status = Column(Enum(ConstraintStatus, native_enum=False), nullable=False, default=ConstraintStatus.OPEN)
    source_interference_id = Column(UUID(as_uuid=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, index=True, nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
