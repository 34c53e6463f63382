"""
Error taxonomy for the work-planning services.

Every error is an HTTPException so that services can raise them directly and
FastAPI renders them with the matching status code.
"""
from typing import Optional

from fastapi import HTTPException, status


class WorkPlanError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, details: Optional[dict] = None) -> None:
        self.details = details or {}
        super().__init__(status_code=self.status_code, detail=detail)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(WorkPlanError):
    """Well-formed input that breaks a business rule (missing cause, negative quantity)."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidDateError(ValidationError):
    def __init__(self, value) -> None:
        super().__init__(f"Invalid date: {value!r}", details={"value": str(value)})


class NotFoundError(WorkPlanError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id=None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource} not found"
        if resource_id is not None:
            msg = f"{resource} {resource_id} not found"
        super().__init__(msg)


class ConflictError(WorkPlanError):
    """Illegal state transition or unique-key violation."""
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(WorkPlanError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Operation aborted: {action}")


__all__ = [
    "WorkPlanError",
    "ValidationError",
    "InvalidDateError",
    "NotFoundError",
    "ConflictError",
    "PersistenceError",
]
