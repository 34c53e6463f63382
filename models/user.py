from sqlalchemy import Boolean, Column, String
from sqlalchemy.dialects.postgresql import UUID
import uuid

from core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)  # type: ignore
    username = Column(String, unique=True, index=True, nullable=False)  # type: ignore
    email = Column(String, unique=True, index=True, nullable=False)  # type: ignore
    is_active = Column(Boolean, default=True)  # type: ignore
    hashed_password = Column(String, nullable=False)  # type: ignore
    role = Column(String, default="VIEWER")  # type: ignore  # PLANNER, PRODUCTION, VIEWER or ADMIN
    sector = Column(String(120), nullable=True)  # type: ignore  # stamped onto acceptance events
    company_id = Column(UUID(as_uuid=True), nullable=True, index=True)  # type: ignore
