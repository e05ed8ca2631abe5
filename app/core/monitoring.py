"""Health checks and monitoring endpoints"""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
import redis.asyncio as redis

from app.config.database import get_db
from app.config.settings import get_settings
from app.models.reminder import ReminderStatus, ScheduledReminder
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)
settings = get_settings()

health_router = APIRouter()

# Pending reminders this far past due mean the sweep is not running
REMINDER_LAG_TOLERANCE = timedelta(minutes=10)


@health_router.get("/")
async def health_check():
    """Liveness check"""
    return {"status": "healthy", "service": "booking-api"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Database, broker and reminder-sweep status"""
    checks = {
        "api": "healthy",
        "database": "unknown",
        "redis": "unknown",
        "reminders": "unknown",
    }
    overdue = None

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        checks["database"] = f"unhealthy: {str(e)}"

    # Redis is the Celery broker that delivers WhatsApp messages
    try:
        redis_client = redis.from_url(settings.REDIS_URL)
        await redis_client.ping()
        checks["redis"] = "healthy"
        await redis_client.aclose()
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        checks["redis"] = f"unhealthy: {str(e)}"

    if checks["database"] == "healthy":
        overdue = db.query(ScheduledReminder).filter(
            ScheduledReminder.status == ReminderStatus.PENDING,
            ScheduledReminder.scheduled_time < utc_now() - REMINDER_LAG_TOLERANCE
        ).count()
        checks["reminders"] = "healthy" if overdue == 0 else "lagging"

    overall = "healthy" if all(s == "healthy" for s in checks.values() if s != "unknown") else "degraded"
    return {**checks, "overdue_reminders": overdue, "overall": overall}
