from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TransitionRequest(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=5000)


class AcceptanceEventResponse(BaseModel):
    id: UUID
    plan_id: UUID
    actor_id: Optional[UUID] = None
    actor_name: str
    sector: str
    event_type: str
    from_status: str
    to_status: str
    notes: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
