from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from core.database import get_db
from core.security import get_current_user
from models.user import User
from services.auth_service import AuthService
from services.config_service import get_access_token_minutes
from schemas.user import UserCreate, UserResponse

router = APIRouter(prefix="/auth", tags=["authentication"])

SELF_SERVICE_ROLES = {"VIEWER", "PLANNER", "PRODUCTION"}


@router.post("/register", response_model=UserResponse)
def register_user(
    user_in: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new user account."""
    requested_role = str(user_in.role).strip().upper()
    if requested_role not in SELF_SERVICE_ROLES:
        raise HTTPException(
            status_code=403,
            detail="Privileged roles cannot be self-registered. Contact an administrator."
        )
    user_in.role = requested_role
    return AuthService.register_user(user_in, db)


@router.post("/login")
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """Authenticate user and return access token."""
    user = AuthService.authenticate_user(form_data.username, form_data.password, db)
    access_token = AuthService.create_access_token(
        data={"sub": user.email, "role": user.role}
    )

    response = JSONResponse(content={
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role,
        "sector": user.sector,
        "user": user.email
    })

    # Cookie lives as long as the token itself
    response.set_cookie(
        key="access_token",
        value=access_token,
        max_age=get_access_token_minutes() * 60,
        httponly=True,
        samesite="lax",
        secure=False
    )

    return response


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user profile."""
    return current_user
