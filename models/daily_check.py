from datetime import datetime
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from core.database import Base
from models.enums import CauseCategory


class DailyCheckRecord(Base):
    __tablename__ = "daily_check_records"

    __table_args__ = (
        UniqueConstraint("activity_id", "check_date", name="uq_daily_check_activity_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    activity_id = Column(
        UUID(as_uuid=True),
        ForeignKey("planned_activities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_date = Column(Date, nullable=False)
    weekday = Column(Integer, nullable=False)

    # Frozen at first insert
    planned_qty = Column(Float, nullable=False, default=0.0)
    actual_qty = Column(Float, nullable=False, default=0.0)
    completed = Column(Boolean, nullable=False, default=False)

    cause = Column(Enum(CauseCategory, native_enum=False), nullable=True)
    cause_description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    recorded_by = Column(String(160), nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    activity = relationship("PlannedActivity", back_populates="check_records")
