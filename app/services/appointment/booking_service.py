# app/services/appointment/booking_service.py
"""Customer-facing booking through a business's public link"""
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.appointment import Appointment
from app.models.business import Business
from app.services.appointment.appointment_service import AppointmentService
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.time_of_day import TimeOfDay
from app.services.business.business_service import BusinessService
from app.services.exceptions import (
    AppointmentNotFoundError,
    BookingPolicyError,
    ServiceNotFoundError,
    SlotUnavailableError,
)
from app.services.whatsapp.whatsapp_notifier import normalize_phone
from app.utils.time_utils import local_today
import logging

logger = logging.getLogger(__name__)


class BookingService:
    """Adds the public-link policies on top of AppointmentService"""

    @staticmethod
    def check_booking_window(db: Session, business: Business, target_date: date) -> None:
        """No past dates, and nothing beyond the business's advance-booking horizon"""
        today = local_today()
        if target_date < today:
            raise BookingPolicyError("Cannot book a date in the past")

        advance_days = BusinessService.get_settings(db, business.id).advance_booking_days
        if target_date > today + timedelta(days=advance_days):
            raise BookingPolicyError(f"Bookings are open up to {advance_days} days ahead")

    @staticmethod
    def ensure_slot_offered(
            db: Session,
            business: Business,
            target_date: date,
            start_time: str,
            service_id: Optional[UUID],
            staff_member_id: Optional[UUID]
    ) -> None:
        slots = AvailabilityService.get_available_slots(
            db, business.id, target_date, service_id=service_id, staff_member_id=staff_member_id
        )
        if str(TimeOfDay.parse(start_time)) not in slots:
            raise SlotUnavailableError("The requested time is not available")

    @staticmethod
    def book(
            db: Session,
            business: Business,
            customer_name: str,
            customer_phone: str,
            target_date: date,
            start_time: str,
            service_id: Optional[UUID] = None,
            staff_member_id: Optional[UUID] = None,
            service_description: Optional[str] = None,
            notes: Optional[str] = None
    ) -> Appointment:
        if service_id is not None:
            service, _ = AvailabilityService.resolve_service_duration(db, business.id, service_id)
            if not service.is_active:
                raise ServiceNotFoundError("Service not found")

        BookingService.check_booking_window(db, business, target_date)
        BookingService.ensure_slot_offered(db, business, target_date, start_time, service_id, staff_member_id)

        return AppointmentService.create_appointment(
            db,
            business_id=business.id,
            customer_name=customer_name,
            appointment_date=target_date,
            start_time=start_time,
            customer_phone=customer_phone,
            service_id=service_id,
            staff_member_id=staff_member_id,
            service_description=service_description,
            notes=notes,
        )

    @staticmethod
    def find_customer_appointment(
            db: Session,
            business: Business,
            appointment_id: UUID,
            customer_phone: str
    ) -> Appointment:
        """The appointment, provided the phone matches the one it was booked with"""
        appointment = AppointmentService.get_appointment(db, business.id, appointment_id)
        if not appointment.customer_phone or \
                normalize_phone(appointment.customer_phone) != normalize_phone(customer_phone):
            raise AppointmentNotFoundError("Appointment not found")
        return appointment

    @staticmethod
    def reschedule(
            db: Session,
            business: Business,
            appointment_id: UUID,
            customer_phone: str,
            new_date: date,
            new_time: str,
            staff_member_id: Optional[UUID] = None
    ) -> Appointment:
        appointment = BookingService.find_customer_appointment(db, business, appointment_id, customer_phone)
        staff_member_id = staff_member_id if staff_member_id is not None else appointment.staff_member_id

        BookingService.check_booking_window(db, business, new_date)
        BookingService.ensure_slot_offered(
            db, business, new_date, new_time, appointment.service_id, staff_member_id
        )

        return AppointmentService.reschedule_appointment(
            db, business.id, appointment.id, new_date, new_time, staff_member_id
        )

    @staticmethod
    def cancel(
            db: Session,
            business: Business,
            appointment_id: UUID,
            customer_phone: str,
            reason: Optional[str] = None
    ) -> Appointment:
        appointment = BookingService.find_customer_appointment(db, business, appointment_id, customer_phone)
        return AppointmentService.cancel_appointment(
            db, business.id, appointment.id, enforce_notice=True, reason=reason
        )
