import os
import sys
import uuid
from datetime import date, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


@compiles(PG_UUID, "sqlite")
def _compile_uuid_sqlite(type_, compiler, **kwargs):
    return "CHAR(36)"


from main import app  # noqa: E402
from core.database import Base, get_db  # noqa: E402
from core.security import get_current_user  # noqa: E402
from models.constraint import Constraint, ConstraintStatus  # noqa: E402
from models.quantity import QuantityItem, QuantityLink  # noqa: E402
from models.schedule import ScheduleActivity, ScheduleActivityStatus, ScheduleActivityType  # noqa: E402
from services.config_service import set_week_start_day  # noqa: E402
from services.plan_service import PlanService  # noqa: E402
from services.week_service import compute_week  # noqa: E402

COMPANY_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
PROJECT_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")

# Monday 3 June 2024 .. Sunday 9 June 2024, ISO week 23
WEEK_MONDAY = date(2024, 6, 3)


class MockUser:
    def __init__(self, role: str, sector: str = "Planning") -> None:
        self.id = uuid.UUID("00000000-0000-0000-0000-000000000001")
        self.role = role
        self.email = "test@example.com"
        self.username = "test-user"
        self.sector = sector
        self.company_id = COMPANY_ID


@pytest.fixture(autouse=True)
def _reset_week_start():
    set_week_start_day(None)
    yield
    set_week_start_day(None)


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def current_user():
    return MockUser("ADMIN")


@pytest.fixture(scope="function")
def client(db_session, current_user):
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_current_user] = lambda: current_user

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def add_schedule_activity(db, code: str, start: date, end: date, **overrides) -> ScheduleActivity:
    values = dict(
        project_id=PROJECT_ID,
        company_id=COMPANY_ID,
        code=code,
        name=f"Activity {code}",
        start_date=start,
        end_date=end,
        progress=0.0,
        status=ScheduleActivityStatus.NOT_STARTED,
        type=ScheduleActivityType.TASK,
    )
    values.update(overrides)
    row = ScheduleActivity(**values)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def add_constraint(db, activity_id, description: str, created_at: datetime = None, **overrides) -> Constraint:
    values = dict(
        project_id=PROJECT_ID,
        company_id=COMPANY_ID,
        activity_id=activity_id,
        description=description,
        status=ConstraintStatus.OPEN,
    )
    if created_at is not None:
        values["created_at"] = created_at
    values.update(overrides)
    row = Constraint(**values)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def link_quantity(db, schedule_activity_id, planned_qty=None, takeoff_qty=None, unit="m", weight=1.0) -> QuantityLink:
    item = QuantityItem(
        project_id=PROJECT_ID,
        description="Concrete slab",
        unit=unit,
        planned_qty=planned_qty,
        takeoff_qty=takeoff_qty,
    )
    db.add(item)
    db.flush()
    link = QuantityLink(schedule_activity_id=schedule_activity_id, item_id=item.id, weight=weight)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


def provision(db, reference_date: date = WEEK_MONDAY):
    window = compute_week(reference_date)
    return PlanService.get_or_create_plan(
        company_id=COMPANY_ID,
        project_id=PROJECT_ID,
        iso_week=window.iso_week,
        iso_year=window.iso_year,
        window_start=window.start,
        window_end=window.end,
        db=db,
    )
