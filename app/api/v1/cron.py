# app/api/v1/cron.py
"""Endpoints hit by an external scheduler"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import verify_cron_secret
from app.config.database import get_db
from app.services.whatsapp.reminder_service import ReminderService

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(verify_cron_secret)])


@router.get("/process-reminders")
def process_reminders(db: Session = Depends(get_db)):
    """Send due reminders inline. Same sweep the Celery beat schedule runs."""
    summary = ReminderService.process_due_reminders(db)
    return {"message": f"Processed {summary['processed']} reminders", **summary}
