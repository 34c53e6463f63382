from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from core.database import commit_or_abort
from models.user import User
from schemas.user import UserCreate
from services.config_service import get_access_token_minutes, get_secret_key

ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12
)


class AuthService:
    """Authentication for planners and production staff."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=get_access_token_minutes()))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, get_secret_key(), algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> dict:
        """Verify JWT token and return payload."""
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
        try:
            payload = jwt.decode(token, get_secret_key(), algorithms=[ALGORITHM])
        except JWTError:
            raise credentials_exception
        if payload.get("sub") is None:
            raise credentials_exception
        return payload

    @staticmethod
    def register_user(user_in: UserCreate, db: Session) -> User:
        existing = db.query(User).filter(  # type: ignore
            (User.email == user_in.email) | (User.username == user_in.username)
        ).first()

        if existing:
            raise HTTPException(
                status_code=400,
                detail="User with this email or username already exists."
            )

        new_user = User(
            email=user_in.email,
            username=user_in.username,
            hashed_password=AuthService.get_password_hash(user_in.password),
            role=user_in.role.upper(),
            sector=(user_in.sector or "").strip() or None,
            company_id=user_in.company_id,
        )

        db.add(new_user)
        commit_or_abort(db, "register user")
        db.refresh(new_user)
        return new_user

    @staticmethod
    def authenticate_user(email: str, password: str, db: Session) -> User:
        user = db.query(User).filter(User.email == email).first()  # type: ignore

        if not user or not AuthService.verify_password(password, str(user.hashed_password)):
            raise HTTPException(
                status_code=401,
                detail="Incorrect email or password"
            )
        return user

    @staticmethod
    def get_user_from_token(token: str, db: Session) -> User:
        payload = AuthService.verify_token(token)
        email = str(payload.get("sub"))

        user = db.query(User).filter(User.email == email).first()  # type: ignore
        if user is None:
            raise HTTPException(status_code=401, detail="User not found")
        return user
