import logging
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from core.exceptions import ConflictError, PersistenceError

load_dotenv()

log = logging.getLogger(__name__)

# Configure according to the deployment method's database url
DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:

    raise ValueError("DATABASE_URL not found in .env file")

engine = create_engine(
    DATABASE_URL,

    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},

    pool_pre_ping=True

)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Dependency to provide a DB session for FastAPI routes.
    Ensures sessions are closed automatically to prevent memory leaks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_abort(db: Session, action: str) -> None:
    """
    Commit the current unit of work.

    Unique-key violations surface as ConflictError; any other database failure
    is rolled back, logged and surfaced as a generic PersistenceError.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        log.warning("Integrity violation during %s: %s", action, exc.orig)
        raise ConflictError(f"Conflicting write during {action}") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("Persistence failure during %s: %s", action, exc, exc_info=True)
        raise PersistenceError(action) from exc
