# app/tasks/notification_tasks.py
"""Background WhatsApp delivery: appointment notifications and the reminder sweep"""
import logging
import uuid

from app.config.celery_config import celery_app
from app.config.database import get_db
from app.services.exceptions import AppointmentNotFoundError
from app.services.whatsapp.notification_service import NotificationService
from app.services.whatsapp.reminder_service import ReminderService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_appointment_notification(self, appointment_id: str, message_type: str):
    """Send a confirmation / cancellation / reschedule message for one appointment"""
    try:
        db = next(get_db())
        try:
            result = NotificationService.notify_appointment(db, uuid.UUID(appointment_id), message_type)
        finally:
            db.close()

        if result is None:
            return {"status": "skipped", "appointment_id": appointment_id}

        logger.info(f"{message_type} message for appointment {appointment_id} via {result.method}")
        return {
            "status": "sent" if result.success else "failed",
            "appointment_id": appointment_id,
            "method": result.method,
        }

    except AppointmentNotFoundError:
        logger.warning(f"Appointment {appointment_id} disappeared before {message_type} was sent")
        return {"status": "skipped", "appointment_id": appointment_id}

    except Exception as exc:
        logger.error(f"Error sending {message_type} for appointment {appointment_id}: {str(exc)}", exc_info=True)
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))


@celery_app.task(bind=True, max_retries=3)
def process_due_reminders(self):
    """Periodic sweep, also reachable through the cron endpoint"""
    try:
        db = next(get_db())
        try:
            summary = ReminderService.process_due_reminders(db)
        finally:
            db.close()

        return {key: summary[key] for key in ("processed", "sent", "failed")}

    except Exception as exc:
        logger.error(f"Reminder sweep failed: {str(exc)}", exc_info=True)
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))
