# app/services/whatsapp/notification_service.py
"""Sends appointment messages and keeps the outbound message log"""
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.appointment import Appointment
from app.models.business import Business, BusinessSettings
from app.models.whatsapp import MessageType, WhatsAppMessage
from app.services.exceptions import (
    AppointmentNotFoundError,
    BookingError,
    TemplateNotFoundError,
    WhatsAppDisabledError,
)
from app.services.whatsapp.template_service import TemplateService, render_template
from app.services.whatsapp.whatsapp_notifier import DeliveryResult, whatsapp_notifier
from app.utils.time_utils import utc_now
import logging

logger = logging.getLogger(__name__)


class NotificationService:

    @staticmethod
    def get_settings_row(db: Session, business_id: UUID) -> Optional[BusinessSettings]:
        return db.query(BusinessSettings).filter(BusinessSettings.business_id == business_id).first()

    @staticmethod
    def send_appointment_message(
            db: Session,
            business_id: UUID,
            phone_number: str,
            message_type: str,
            appointment_id: Optional[UUID] = None,
            custom_message: Optional[str] = None,
            template_variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send one message on behalf of a business.

        Uses custom_message verbatim when given, otherwise renders the
        business's active template for message_type.

        Raises:
            WhatsAppDisabledError: messaging is switched off for the business
            TemplateNotFoundError: no custom message and no active template
        """
        if message_type not in MessageType.ALL:
            raise BookingError(f"Unknown message type: {message_type}")

        settings_row = NotificationService.get_settings_row(db, business_id)
        if not settings_row or not settings_row.whatsapp_enabled:
            raise WhatsAppDisabledError("WhatsApp is not enabled for this business")

        content = custom_message
        if not content:
            template = TemplateService.get_active_template(db, business_id, message_type)
            if not template:
                raise TemplateNotFoundError("No template found for this message type")
            content = render_template(template.message_template, template_variables or {})

        result = whatsapp_notifier.send(phone_number, content)
        record = NotificationService.log_message(
            db, business_id, appointment_id, phone_number, message_type, content, result
        )

        return {
            "success": result.success,
            "method": result.method,
            "message_id": result.message_id,
            "link": result.link,
            "record_id": str(record.id),
        }

    @staticmethod
    def notify_appointment(db: Session, appointment_id: UUID, message_type: str) -> Optional[DeliveryResult]:
        """
        Automatic message about an appointment (confirmation, cancellation, ...).
        Returns None when the business's settings say not to send.
        """
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise AppointmentNotFoundError("Appointment not found")

        if not appointment.customer_phone:
            logger.info(f"Appointment {appointment_id} has no phone number, skipping {message_type}")
            return None

        settings_row = NotificationService.get_settings_row(db, appointment.business_id)
        if not settings_row or not settings_row.whatsapp_enabled:
            return None
        if message_type == MessageType.CONFIRMATION and not settings_row.auto_confirmation_enabled:
            return None

        business = db.query(Business).filter(Business.id == appointment.business_id).first()
        return NotificationService.deliver(db, appointment, business, message_type)

    @staticmethod
    def deliver(
            db: Session,
            appointment: Appointment,
            business: Business,
            message_type: str,
            extra: Optional[Dict[str, Any]] = None
    ) -> DeliveryResult:
        """Compose, send and log one message to the appointment's customer"""
        content = TemplateService.compose(db, appointment, business, message_type, extra)

        result = whatsapp_notifier.send(appointment.customer_phone, content)
        NotificationService.log_message(
            db, business.id, appointment.id, appointment.customer_phone, message_type, content, result
        )
        return result

    @staticmethod
    def log_message(
            db: Session,
            business_id: UUID,
            appointment_id: Optional[UUID],
            phone_number: str,
            message_type: str,
            content: str,
            result: DeliveryResult
    ) -> WhatsAppMessage:
        record = WhatsAppMessage(
            business_id=business_id,
            appointment_id=appointment_id,
            phone_number=phone_number,
            message_type=message_type,
            message_content=content,
            status="sent" if result.success else "failed",
            method=result.method,
            external_id=result.message_id,
            error_message=None if result.success else (result.error or "Failed to send"),
            sent_at=utc_now() if result.success else None,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return record
