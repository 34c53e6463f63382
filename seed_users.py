"""
Seed the planning team accounts.

ADMIN cannot be self-registered through /auth/register, so the first
administrator comes from here.

Usage:
    python seed_users.py

Environment variables (optional):
    SEED_PASSWORD: Password shared by the seeded accounts (default: WeekPlan2026!)
    SEED_COMPANY_ID: Company UUID stamped onto the accounts
"""
import logging
import os
import sys
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

# Add the current directory to the system path so Python can find your files
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from core.database import SessionLocal, engine, Base
from services.auth_service import AuthService
from models.user import User

log = logging.getLogger(__name__)

SEED_ACCOUNTS = [
    # (email, username, role, sector)
    ("admin@weekplan.example.com", "planning_admin", "ADMIN", "Planning"),
    ("planner@weekplan.example.com", "site_planner_01", "PLANNER", "Planning"),
    ("production@weekplan.example.com", "production_lead_01", "PRODUCTION", "Production"),
]


def seed_accounts(db: Session, password: str, company_id: Optional[uuid.UUID] = None) -> List[str]:
    """Create any missing seed account; returns the emails that were created."""
    created = []
    for email, username, role, sector in SEED_ACCOUNTS:
        if db.query(User).filter(User.email == email).first():
            continue
        db.add(
            User(
                id=uuid.uuid4(),
                email=email,
                username=username,
                hashed_password=AuthService.get_password_hash(password),
                role=role,
                sector=sector,
                company_id=company_id,
                is_active=True,
            )
        )
        created.append(email)
    db.commit()
    return created


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)

    raw_company = os.getenv("SEED_COMPANY_ID")
    company_id = uuid.UUID(raw_company) if raw_company else None

    db = SessionLocal()
    try:
        created = seed_accounts(db, os.getenv("SEED_PASSWORD", "WeekPlan2026!"), company_id)
    finally:
        db.close()

    for email in created:
        log.info("Created %s", email)
    if not created:
        log.info("All seed accounts already exist")
    return 0


if __name__ == "__main__":
    sys.exit(main())
