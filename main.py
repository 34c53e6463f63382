import logging

from fastapi import FastAPI

from core.database import engine, Base
from services.config_service import get_log_level

# Import all models to register them
from models.user import User
from models.schedule import ScheduleActivity
from models.constraint import Constraint
from models.quantity import QuantityItem, QuantityLink
from models.weekly_plan import WeeklyPlan
from models.planned_activity import PlannedActivity
from models.daily_check import DailyCheckRecord
from models.acceptance_event import AcceptanceEvent
from models.interference import FieldInterference

# Import routers
from api import auth, weeks, planning, check_ins, interferences

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="Weekly Work Plan & PPC",
    description="Weekly look-ahead planning, daily check-ins and Percent Plan Complete tracking",
    version="1.0.0"
)

# Register routers
app.include_router(auth.router)
app.include_router(weeks.router, prefix="/api")
app.include_router(planning.router, prefix="/api")
app.include_router(check_ins.router, prefix="/api")
app.include_router(interferences.router, prefix="/api")


# ==================== HEALTH CHECK ====================
@app.get("/health")
def health_check():
    """Health check endpoint for Docker and Kubernetes."""
    return {
        "status": "healthy",
        "service": "Weekly Work Plan & PPC",
        "version": "1.0.0"
    }


@app.get("/api/health")
def api_health():
    """API health check endpoint."""
    return {
        "status": "operational",
        "version": "1.0.0",
        "service": "Weekly Work Plan & PPC"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
