from datetime import datetime
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from core.database import Base
from models.weekly_plan import AcceptanceEventType, PlanStatus


class AcceptanceEvent(Base):
    """Append-only audit entry; rows are never updated or deleted."""
    __tablename__ = "acceptance_events"

    __table_args__ = (
        UniqueConstraint("plan_id", "sequence", name="uq_acceptance_event_sequence"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    plan_id = Column(UUID(as_uuid=True), ForeignKey("weekly_plans.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)

    actor_id = Column(UUID(as_uuid=True), nullable=True)
    actor_name = Column(String(160), nullable=False)
    sector = Column(String(120), nullable=False, default="Not informed")

    event_type = Column(Enum(AcceptanceEventType, native_enum=False), nullable=False)
    from_status = Column(Enum(PlanStatus, native_enum=False), nullable=False)
    to_status = Column(Enum(PlanStatus, native_enum=False), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, index=True, nullable=False)

    plan = relationship("WeeklyPlan", back_populates="events")
