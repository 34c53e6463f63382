from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=8)
    role: str = "VIEWER"
    sector: Optional[str] = Field(default=None, max_length=120)
    company_id: Optional[UUID] = None


class UserResponse(BaseModel):
    id: UUID
    email: EmailStr
    username: str
    role: str
    sector: Optional[str] = None
    company_id: Optional[UUID] = None
    is_active: bool
    model_config = ConfigDict(from_attributes=True)
