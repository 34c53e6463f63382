from typing import List, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status

from core.security import get_current_user
from models.user import User


def role_name(user) -> str:
    # Handle both Enum and String roles safely
    return (str(user.role.value) if hasattr(user.role, 'value') else str(user.role)).upper()


def scoped_company_id(user, requested: Optional[UUID] = None) -> Optional[UUID]:
    """Only ADMIN may look at another company; everyone else sees their own."""
    if requested is not None and role_name(user) == "ADMIN":
        return requested
    return getattr(user, "company_id", None)


class RoleChecker:
    def __init__(self, allowed_roles: List[str]):
        self.allowed_roles = allowed_roles

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        if role_name(user) not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Operation not permitted. Required roles: {self.allowed_roles}"
            )
        return user


require_admin = RoleChecker(["ADMIN"])
require_planning = RoleChecker(["PLANNER", "ADMIN"])
require_production = RoleChecker(["PRODUCTION", "ADMIN"])
