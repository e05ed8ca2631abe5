# ===== app/services/availability/availability_service.py =====
from typing import List, Optional, Tuple
from datetime import date
from uuid import UUID
from sqlalchemy.orm import Session
from app.config.settings import get_settings
from app.models.appointment import Appointment, AppointmentStatus
from app.models.availability import AvailabilityWindow as WindowRow, BlockedDate as BlockedDateRow
from app.models.business import Business, BusinessSettings
from app.models.service import Service
from app.models.staff import StaffMember
from app.services.availability.slot_engine import (
    AvailabilityWindow,
    BlockedDate,
    ExistingAppointment,
    compute_available_slots,
)
from app.services.availability.time_of_day import TimeOfDay
from app.services.exceptions import (
    BusinessNotFoundError,
    ServiceNotFoundError,
    StaffNotFoundError,
)
import logging

logger = logging.getLogger(__name__)
settings = get_settings()


def day_of_week(target_date: date) -> int:
    """Weekday number with 0=Sunday ... 6=Saturday"""
    return (target_date.weekday() + 1) % 7


class AvailabilityService:
    """Resolves a booking-availability query and feeds the slot engine"""

    @staticmethod
    def get_available_slots(
            db: Session,
            business_id: UUID,
            target_date: date,
            service_id: Optional[UUID] = None,
            staff_member_id: Optional[UUID] = None,
    ) -> List[str]:
        """
        Bookable start times ("HH:MM") for one day.

        An empty list means the day is fully booked, blocked or has no
        windows. Missing business/service/staff raise instead, so callers can
        tell "no slots" apart from a bad request.
        """
        business = AvailabilityService.get_business(db, business_id)

        if staff_member_id is not None:
            AvailabilityService.get_staff_member(db, business.id, staff_member_id)

        _, duration = AvailabilityService.resolve_service_duration(db, business.id, service_id)

        windows = AvailabilityService.load_windows(db, business.id, day_of_week(target_date), staff_member_id)
        if not windows:
            logger.info(f"No availability windows for business {business.id} on {target_date}")
            return []

        blocked = AvailabilityService.is_blocked(db, business.id, target_date, staff_member_id)
        if blocked:
            logger.info(f"Date {target_date} is blocked for business {business.id}")
            return []

        existing = AvailabilityService.load_occupying_appointments(
            db, business.id, target_date, staff_member_id
        )

        buffer_minutes = 0
        if settings.APPLY_BOOKING_BUFFER:
            buffer_minutes = AvailabilityService.get_buffer_minutes(db, business.id)

        slots = compute_available_slots(
            windows=windows,
            blocked=blocked,
            existing_appointments=existing,
            service_duration_minutes=duration,
            step_minutes=settings.SLOT_STEP_MINUTES,
            buffer_minutes=buffer_minutes,
        )

        logger.debug(
            f"Computed {len(slots)} slots for business {business.id} on {target_date} "
            f"(duration={duration}, staff={staff_member_id})"
        )
        return slots

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    @staticmethod
    def get_business(db: Session, business_id: UUID) -> Business:
        business = db.query(Business).filter(
            Business.id == business_id,
            Business.is_active == True
        ).first()
        if not business:
            raise BusinessNotFoundError("Business not found")
        return business

    @staticmethod
    def get_staff_member(db: Session, business_id: UUID, staff_member_id: UUID) -> StaffMember:
        staff = db.query(StaffMember).filter(
            StaffMember.id == staff_member_id,
            StaffMember.business_id == business_id
        ).first()
        if not staff:
            raise StaffNotFoundError("Staff member not found")
        return staff

    @staticmethod
    def resolve_service_duration(
            db: Session,
            business_id: UUID,
            service_id: Optional[UUID]
    ) -> Tuple[Optional[Service], int]:
        """Return the service (if any) and the slot length to search for"""
        default = settings.DEFAULT_SERVICE_DURATION_MINUTES
        if service_id is None:
            return None, default

        service = db.query(Service).filter(
            Service.id == service_id,
            Service.business_id == business_id
        ).first()
        if not service:
            raise ServiceNotFoundError("Service not found")

        return service, service.duration_minutes or default

    @staticmethod
    def get_buffer_minutes(db: Session, business_id: UUID) -> int:
        row = db.query(BusinessSettings).filter(BusinessSettings.business_id == business_id).first()
        return row.buffer_minutes if row and row.buffer_minutes else 0

    @staticmethod
    def load_windows(
            db: Session,
            business_id: UUID,
            weekday: int,
            staff_member_id: Optional[UUID]
    ) -> List[AvailabilityWindow]:
        """Active windows for the weekday: the staff member's own, or the general calendar"""
        query = db.query(WindowRow).filter(
            WindowRow.business_id == business_id,
            WindowRow.day_of_week == weekday,
            WindowRow.is_active == True
        )
        if staff_member_id is not None:
            query = query.filter(WindowRow.staff_member_id == staff_member_id)
        else:
            query = query.filter(WindowRow.staff_member_id.is_(None))

        rows = query.order_by(WindowRow.start_time.asc()).all()
        return [
            AvailabilityWindow(
                day_of_week=row.day_of_week,
                start=TimeOfDay.parse(row.start_time),
                end=TimeOfDay.parse(row.end_time),
                staff_id=row.staff_member_id,
                active=row.is_active,
            )
            for row in rows
        ]

    @staticmethod
    def is_blocked(
            db: Session,
            business_id: UUID,
            target_date: date,
            staff_member_id: Optional[UUID]
    ) -> bool:
        rows = db.query(BlockedDateRow).filter(
            BlockedDateRow.business_id == business_id,
            BlockedDateRow.blocked_date == target_date
        ).all()
        blocks = [BlockedDate(blocked_date=row.blocked_date, staff_id=row.staff_member_id) for row in rows]
        return any(block.blocks(staff_member_id) for block in blocks)

    @staticmethod
    def load_occupying_appointments(
            db: Session,
            business_id: UUID,
            target_date: date,
            staff_member_id: Optional[UUID],
            exclude_appointment_id: Optional[UUID] = None,
    ) -> List[ExistingAppointment]:
        """Non-cancelled appointments on the date in the same staff scope"""
        query = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.date == target_date,
            Appointment.status != AppointmentStatus.CANCELLED
        )
        if staff_member_id is not None:
            query = query.filter(Appointment.staff_member_id == staff_member_id)
        else:
            query = query.filter(Appointment.staff_member_id.is_(None))
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return [
            ExistingAppointment(
                start=TimeOfDay.parse(row.start_time),
                duration_minutes=row.duration_minutes or settings.DEFAULT_SERVICE_DURATION_MINUTES,
            )
            for row in query.all()
        ]
