# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""Service for creating and changing appointments"""
from datetime import date, time, timedelta
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.appointment import Appointment, AppointmentStatus
from app.models.business import Business, BusinessSettings
from app.models.whatsapp import MessageType
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.time_of_day import MINUTES_PER_DAY, TimeOfDay, intervals_overlap
from app.services.exceptions import (
    AppointmentNotFoundError,
    BookingError,
    BookingPolicyError,
    BusinessNotFoundError,
    SlotUnavailableError,
)
from app.services.whatsapp.reminder_service import ReminderService
from app.tasks.notification_tasks import send_appointment_notification
from app.utils.time_utils import local_to_utc, utc_now
import logging

logger = logging.getLogger(__name__)
settings = get_settings()

# Recorded on the original row when an appointment is moved
RESCHEDULED_REASON = "rescheduled"


def _notify(appointment_id: UUID, message_type: str) -> None:
    """Queue a customer message. A broker outage must not undo a committed booking."""
    try:
        send_appointment_notification.delay(str(appointment_id), message_type)
    except Exception as e:
        logger.error(f"Could not queue {message_type} for appointment {appointment_id}: {str(e)}", exc_info=True)


class AppointmentService:
    """Handles appointment writes"""

    @staticmethod
    def create_appointment(
            db: Session,
            business_id: UUID,
            customer_name: str,
            appointment_date: date,
            start_time: Union[str, time],
            customer_phone: Optional[str] = None,
            service_id: Optional[UUID] = None,
            staff_member_id: Optional[UUID] = None,
            service_description: Optional[str] = None,
            notes: Optional[str] = None,
            status: str = AppointmentStatus.SCHEDULED
    ) -> Appointment:
        """
        Book an appointment.

        The overlap check is repeated here under a lock on the business row,
        so two requests racing for the same slot cannot both succeed.

        Raises:
            SlotUnavailableError: the time overlaps a non-cancelled appointment
        """
        try:
            AppointmentService._lock_business(db, business_id)
            appointment = AppointmentService._insert(
                db,
                business_id=business_id,
                customer_name=customer_name,
                appointment_date=appointment_date,
                start_time=start_time,
                customer_phone=customer_phone,
                service_id=service_id,
                staff_member_id=staff_member_id,
                service_description=service_description,
                notes=notes,
                status=status,
            )
        except BookingError:
            db.rollback()
            raise
        AppointmentService._commit(db)
        db.refresh(appointment)

        logger.info(
            f"Booked appointment {appointment.id} for business {business_id} "
            f"on {appointment.date} at {appointment.start_time.strftime('%H:%M')}"
        )

        ReminderService.schedule_reminders(db, appointment)
        _notify(appointment.id, MessageType.CONFIRMATION)
        return appointment

    @staticmethod
    def reschedule_appointment(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            new_date: date,
            new_time: Union[str, time],
            staff_member_id: Optional[UUID] = None
    ) -> Appointment:
        """
        Move an appointment to a new date/time.

        The original row is cancelled and a new one is created pointing back
        to it through rescheduled_from. Both happen in one transaction.
        """
        try:
            AppointmentService._lock_business(db, business_id)
            original = AppointmentService.get_appointment(db, business_id, appointment_id)
            if original.is_cancelled:
                raise BookingError("Cannot reschedule a cancelled appointment")

            original.status = AppointmentStatus.CANCELLED
            original.cancelled_at = utc_now()
            original.cancellation_reason = RESCHEDULED_REASON
            ReminderService.cancel_pending(db, original.id)
            db.flush()

            appointment = AppointmentService._insert(
                db,
                business_id=business_id,
                customer_name=original.customer_name,
                appointment_date=new_date,
                start_time=new_time,
                customer_phone=original.customer_phone,
                service_id=original.service_id,
                staff_member_id=staff_member_id if staff_member_id is not None else original.staff_member_id,
                service_description=original.service_description,
                notes=original.notes,
                status=AppointmentStatus.SCHEDULED,
                rescheduled_from=original.id,
            )
        except BookingError:
            db.rollback()
            raise
        AppointmentService._commit(db)
        db.refresh(appointment)

        logger.info(f"Rescheduled appointment {original.id} -> {appointment.id}")

        ReminderService.schedule_reminders(db, appointment)
        _notify(appointment.id, MessageType.RESCHEDULE)
        return appointment

    @staticmethod
    def cancel_appointment(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            enforce_notice: bool = False,
            reason: Optional[str] = None
    ) -> Appointment:
        """
        Cancel an appointment and its pending reminders.

        enforce_notice applies the business's cancellation_hours rule; the
        owner dashboard cancels without it.
        """
        appointment = AppointmentService.get_appointment(db, business_id, appointment_id)
        if appointment.is_cancelled:
            return appointment

        if enforce_notice:
            notice_hours = AppointmentService._cancellation_hours(db, business_id)
            starts_at = local_to_utc(appointment.date, appointment.start_time)
            if starts_at - utc_now() < timedelta(hours=notice_hours):
                raise BookingPolicyError(
                    f"Appointments can only be cancelled at least {notice_hours} hours in advance"
                )

        appointment.status = AppointmentStatus.CANCELLED
        appointment.cancelled_at = utc_now()
        appointment.cancellation_reason = reason
        cancelled = ReminderService.cancel_pending(db, appointment.id)
        db.commit()
        db.refresh(appointment)

        logger.info(f"Cancelled appointment {appointment.id} ({cancelled} reminders cancelled)")
        _notify(appointment.id, MessageType.CANCELLATION)
        return appointment

    @staticmethod
    def update_appointment(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            status: Optional[str] = None,
            notes: Optional[str] = None
    ) -> Appointment:
        """Dashboard edits: status and notes"""
        if status is not None and status not in AppointmentStatus.ALL:
            raise BookingError(f"Invalid status: {status}")

        if status == AppointmentStatus.CANCELLED:
            appointment = AppointmentService.cancel_appointment(db, business_id, appointment_id)
            if notes is None:
                return appointment
            status = None

        appointment = AppointmentService.get_appointment(db, business_id, appointment_id)
        if status is not None:
            if appointment.is_cancelled:
                raise BookingError("Cancelled appointments cannot be reopened; book a new one")
            appointment.status = status
        if notes is not None:
            appointment.notes = notes

        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, business_id: UUID, appointment_id: UUID) -> None:
        appointment = AppointmentService.get_appointment(db, business_id, appointment_id)
        db.delete(appointment)
        db.commit()
        logger.info(f"Deleted appointment {appointment_id}")

    @staticmethod
    def get_appointment(db: Session, business_id: UUID, appointment_id: UUID) -> Appointment:
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.business_id == business_id
        ).first()
        if not appointment:
            raise AppointmentNotFoundError("Appointment not found")
        return appointment

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _lock_business(db: Session, business_id: UUID) -> Business:
        """SELECT ... FOR UPDATE on the tenant row; serialises bookings per business"""
        business = db.query(Business).filter(
            Business.id == business_id,
            Business.is_active == True
        ).with_for_update().first()
        if not business:
            raise BusinessNotFoundError("Business not found")
        return business

    @staticmethod
    def _cancellation_hours(db: Session, business_id: UUID) -> int:
        row = db.query(BusinessSettings).filter(BusinessSettings.business_id == business_id).first()
        return row.cancellation_hours if row else 24

    @staticmethod
    def _insert(
            db: Session,
            business_id: UUID,
            customer_name: str,
            appointment_date: date,
            start_time: Union[str, time],
            customer_phone: Optional[str],
            service_id: Optional[UUID],
            staff_member_id: Optional[UUID],
            service_description: Optional[str],
            notes: Optional[str],
            status: str,
            rescheduled_from: Optional[UUID] = None
    ) -> Appointment:
        if staff_member_id is not None:
            AvailabilityService.get_staff_member(db, business_id, staff_member_id)

        service, duration = AvailabilityService.resolve_service_duration(db, business_id, service_id)

        start = TimeOfDay.parse(start_time)
        end_minutes = start.plus(duration)
        if end_minutes >= MINUTES_PER_DAY:
            raise BookingError("Appointment must end before midnight")

        buffer_minutes = 0
        if settings.APPLY_BOOKING_BUFFER:
            buffer_minutes = AvailabilityService.get_buffer_minutes(db, business_id)

        occupying = AvailabilityService.load_occupying_appointments(
            db, business_id, appointment_date, staff_member_id
        )
        for other in occupying:
            if intervals_overlap(
                    start.minutes, end_minutes,
                    other.start.minutes - buffer_minutes, other.end_minutes + buffer_minutes
            ):
                raise SlotUnavailableError("The requested time is no longer available")

        appointment = Appointment(
            business_id=business_id,
            service_id=service.id if service else None,
            staff_member_id=staff_member_id,
            rescheduled_from=rescheduled_from,
            customer_name=customer_name,
            customer_phone=customer_phone,
            date=appointment_date,
            start_time=start.to_time(),
            end_time=TimeOfDay(end_minutes).to_time(),
            duration_minutes=duration,
            service_description=service.name if service else service_description,
            notes=notes,
            status=status,
        )
        db.add(appointment)
        return appointment

    @staticmethod
    def _commit(db: Session) -> None:
        """Commit a booking; the partial unique index turns a lost race into 409"""
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Double booking rejected by database constraint: {str(e)}")
            raise SlotUnavailableError("The requested time is no longer available")
