from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from models.interference import CompanyType, InterferenceCategory


class InterferenceCreate(BaseModel):
    project_id: UUID
    plan_id: Optional[UUID] = None
    activity_id: Optional[UUID] = None
    company_involved: str = Field(..., min_length=1, max_length=160)
    company_type: CompanyType
    category: Optional[InterferenceCategory] = None
    description: str = Field(..., min_length=1)
    impact: Optional[str] = None
    action_taken: Optional[str] = None
    occurred_at: datetime
    sector: Optional[str] = Field(default=None, max_length=120)


class InterferencePromoteRequest(BaseModel):
    constraint_id: Optional[UUID] = None


class InterferenceResolveRequest(BaseModel):
    action_taken: str = Field(..., min_length=1)


class InterferenceResponse(BaseModel):
    id: UUID
    company_id: Optional[UUID] = None
    project_id: UUID
    plan_id: Optional[UUID] = None
    activity_id: Optional[UUID] = None
    activity_code: Optional[str] = None
    activity_name: Optional[str] = None
    reporter_id: Optional[UUID] = None
    reporter_name: str
    sector: Optional[str] = None
    company_involved: str
    company_type: CompanyType
    category: Optional[InterferenceCategory] = None
    description: str
    impact: Optional[str] = None
    action_taken: Optional[str] = None
    occurred_at: datetime
    recorded_at: datetime
    status: str
    converted_constraint_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)
