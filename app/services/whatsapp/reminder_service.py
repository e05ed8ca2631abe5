# app/services/whatsapp/reminder_service.py
"""Reminder scheduling and the periodic delivery sweep"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.appointment import Appointment
from app.models.business import Business
from app.models.reminder import ReminderStatus, ScheduledReminder
from app.models.whatsapp import MessageType
from app.services.whatsapp.notification_service import NotificationService
from app.utils.time_utils import local_to_utc, utc_now
import logging

logger = logging.getLogger(__name__)
settings = get_settings()

# reminder_type -> (settings flag, lead time, wording used in the message)
REMINDER_TYPES = {
    "24h": ("reminder_24h_enabled", timedelta(hours=24), "tomorrow"),
    "2h": ("reminder_2h_enabled", timedelta(hours=2), "in 2 hours"),
    "30m": ("reminder_30m_enabled", timedelta(minutes=30), "in 30 minutes"),
}


class ReminderService:

    @staticmethod
    def schedule_reminders(
            db: Session,
            appointment: Appointment,
            now: Optional[datetime] = None
    ) -> List[ScheduledReminder]:
        """
        Queue the reminders the business has switched on.

        Each reminder fires a fixed lead time before the appointment's start
        (business timezone, stored as UTC). Reminders whose time has already
        passed are not created.
        """
        now = now or utc_now()
        settings_row = NotificationService.get_settings_row(db, appointment.business_id)
        if not settings_row:
            return []

        starts_at = local_to_utc(appointment.date, appointment.start_time)

        reminders = []
        for reminder_type, (flag, lead_time, _) in REMINDER_TYPES.items():
            if not getattr(settings_row, flag):
                continue
            scheduled_time = starts_at - lead_time
            if scheduled_time <= now:
                continue
            reminder = ScheduledReminder(
                appointment_id=appointment.id,
                business_id=appointment.business_id,
                reminder_type=reminder_type,
                scheduled_time=scheduled_time,
                status=ReminderStatus.PENDING,
            )
            db.add(reminder)
            reminders.append(reminder)

        if reminders:
            db.commit()
            logger.info(f"Scheduled {len(reminders)} reminders for appointment {appointment.id}")
        return reminders

    @staticmethod
    def cancel_pending(db: Session, appointment_id: UUID) -> int:
        """Mark the appointment's pending reminders cancelled. The caller commits."""
        return db.query(ScheduledReminder).filter(
            ScheduledReminder.appointment_id == appointment_id,
            ScheduledReminder.status == ReminderStatus.PENDING
        ).update({"status": ReminderStatus.CANCELLED}, synchronize_session=False)

    @staticmethod
    def list_for_appointment(db: Session, appointment_id: UUID) -> List[ScheduledReminder]:
        return db.query(ScheduledReminder).filter(
            ScheduledReminder.appointment_id == appointment_id
        ).order_by(ScheduledReminder.scheduled_time.asc()).all()

    @staticmethod
    def process_due_reminders(
            db: Session,
            now: Optional[datetime] = None,
            limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Send every pending reminder that is due, up to the batch size"""
        now = now or utc_now()
        limit = limit or settings.REMINDER_BATCH_SIZE

        due = db.query(ScheduledReminder).filter(
            ScheduledReminder.status == ReminderStatus.PENDING,
            ScheduledReminder.scheduled_time <= now
        ).order_by(ScheduledReminder.scheduled_time.asc()).limit(limit).all()

        results = []
        for reminder in due:
            outcome = ReminderService._process_one(db, reminder)
            reminder.status = outcome["status"]
            reminder.processed_at = now
            db.commit()
            results.append(outcome)

        summary = {
            "processed": len(results),
            "sent": sum(1 for r in results if r["status"] == ReminderStatus.SENT),
            "failed": sum(1 for r in results if r["status"] == ReminderStatus.FAILED),
            "results": results,
        }
        if results:
            logger.info(
                f"Processed {summary['processed']} reminders: "
                f"{summary['sent']} sent, {summary['failed']} failed"
            )
        return summary

    @staticmethod
    def _process_one(db: Session, reminder: ScheduledReminder) -> Dict[str, Any]:
        appointment = reminder.appointment
        outcome = {
            "reminder_id": str(reminder.id),
            "appointment_id": str(reminder.appointment_id),
            "reminder_type": reminder.reminder_type,
        }

        if not appointment or appointment.is_cancelled or not appointment.customer_phone:
            outcome["status"] = ReminderStatus.CANCELLED
            return outcome

        outcome["customer"] = appointment.customer_name

        settings_row = NotificationService.get_settings_row(db, appointment.business_id)
        if not settings_row or not settings_row.whatsapp_enabled:
            outcome["status"] = ReminderStatus.FAILED
            outcome["error"] = "WhatsApp is not enabled for this business"
            return outcome

        try:
            business = db.query(Business).filter(Business.id == appointment.business_id).first()
            _, _, wording = REMINDER_TYPES.get(reminder.reminder_type, (None, None, "soon"))
            result = NotificationService.deliver(
                db, appointment, business, MessageType.REMINDER, {"reminder_time": wording}
            )
        except Exception as e:
            logger.error(f"Error processing reminder {reminder.id}: {str(e)}", exc_info=True)
            db.rollback()
            outcome["status"] = ReminderStatus.FAILED
            outcome["error"] = str(e)
            return outcome

        outcome["status"] = ReminderStatus.SENT if result.success else ReminderStatus.FAILED
        if not result.success:
            outcome["error"] = result.error
        return outcome
