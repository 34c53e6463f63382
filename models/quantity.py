"""
Quantity takeoff items and their links to schedule activities.
"""
import uuid

from sqlalchemy import Column, Float, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from core.database import Base


class QuantityItem(Base):
    __tablename__ = "quantity_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    description = Column(String(255), nullable=True)
    unit = Column(String(20), nullable=True)
    planned_qty = Column(Float, nullable=True)
    takeoff_qty = Column(Float, nullable=True)


class QuantityLink(Base):
    __tablename__ = "quantity_links"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    schedule_activity_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    item_id = Column(UUID(as_uuid=True), ForeignKey("quantity_items.id", ondelete="CASCADE"), nullable=False)
    weight = Column(Float, nullable=False, default=1.0)

    item = relationship("QuantityItem")
