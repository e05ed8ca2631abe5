# app/services/availability/schedule_service.py
"""Owner-side management of availability windows and blocked dates"""
from datetime import date, time
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.availability import AvailabilityWindow, BlockedDate
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.time_of_day import InvalidTimeError, TimeOfDay
from app.services.exceptions import BookingError, ResourceNotFoundError
import logging

logger = logging.getLogger(__name__)


class ScheduleService:
    """CRUD over the rows the slot handler reads"""

    @staticmethod
    def check_span(start_time: time, end_time: time) -> None:
        """Refuse windows the slot handler could not read back"""
        try:
            start, end = TimeOfDay.parse(start_time), TimeOfDay.parse(end_time)
        except InvalidTimeError as e:
            raise BookingError(f"Invalid window time: {e}")
        if end <= start:
            raise BookingError("Window end time must be after its start time")

    @staticmethod
    def list_windows(
            db: Session,
            business_id: UUID,
            staff_member_id: Optional[UUID] = None,
            day: Optional[int] = None
    ) -> List[AvailabilityWindow]:
        query = db.query(AvailabilityWindow).filter(AvailabilityWindow.business_id == business_id)
        if staff_member_id is not None:
            query = query.filter(AvailabilityWindow.staff_member_id == staff_member_id)
        if day is not None:
            query = query.filter(AvailabilityWindow.day_of_week == day)
        return query.order_by(
            AvailabilityWindow.day_of_week.asc(),
            AvailabilityWindow.start_time.asc()
        ).all()

    @staticmethod
    def create_window(
            db: Session,
            business_id: UUID,
            day: int,
            start_time: time,
            end_time: time,
            staff_member_id: Optional[UUID] = None,
            is_active: bool = True
    ) -> AvailabilityWindow:
        ScheduleService.check_span(start_time, end_time)
        if staff_member_id is not None:
            AvailabilityService.get_staff_member(db, business_id, staff_member_id)

        window = AvailabilityWindow(
            business_id=business_id,
            staff_member_id=staff_member_id,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        )
        db.add(window)
        db.commit()
        db.refresh(window)

        logger.info(f"Created availability window {window.id} for business {business_id}")
        return window

    @staticmethod
    def get_window(db: Session, business_id: UUID, window_id: UUID) -> AvailabilityWindow:
        window = db.query(AvailabilityWindow).filter(
            AvailabilityWindow.id == window_id,
            AvailabilityWindow.business_id == business_id
        ).first()
        if not window:
            raise ResourceNotFoundError("Availability window not found")
        return window

    @staticmethod
    def update_window(db: Session, business_id: UUID, window_id: UUID, **changes) -> AvailabilityWindow:
        window = ScheduleService.get_window(db, business_id, window_id)

        for field, value in changes.items():
            setattr(window, field, value)

        try:
            ScheduleService.check_span(window.start_time, window.end_time)
        except BookingError:
            db.rollback()
            raise

        db.commit()
        db.refresh(window)
        return window

    @staticmethod
    def delete_window(db: Session, business_id: UUID, window_id: UUID) -> None:
        window = ScheduleService.get_window(db, business_id, window_id)
        db.delete(window)
        db.commit()

    @staticmethod
    def replace_day(
            db: Session,
            business_id: UUID,
            day: int,
            windows: List[dict],
            staff_member_id: Optional[UUID] = None
    ) -> List[AvailabilityWindow]:
        """
        Replace every window of one weekday (and staff scope) in one
        transaction. Used by the weekly-hours editor.
        """
        for item in windows:
            ScheduleService.check_span(item["start_time"], item["end_time"])

        query = db.query(AvailabilityWindow).filter(
            AvailabilityWindow.business_id == business_id,
            AvailabilityWindow.day_of_week == day
        )
        if staff_member_id is not None:
            query = query.filter(AvailabilityWindow.staff_member_id == staff_member_id)
        else:
            query = query.filter(AvailabilityWindow.staff_member_id.is_(None))
        query.delete(synchronize_session=False)

        created = []
        for item in windows:
            window = AvailabilityWindow(
                business_id=business_id,
                staff_member_id=staff_member_id,
                day_of_week=day,
                start_time=item["start_time"],
                end_time=item["end_time"],
                is_active=item.get("is_active", True),
            )
            db.add(window)
            created.append(window)

        db.commit()
        for window in created:
            db.refresh(window)
        return created

    # ------------------------------------------------------------------
    # Blocked dates
    # ------------------------------------------------------------------

    @staticmethod
    def list_blocked_dates(
            db: Session,
            business_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None
    ) -> List[BlockedDate]:
        query = db.query(BlockedDate).filter(BlockedDate.business_id == business_id)
        if start_date:
            query = query.filter(BlockedDate.blocked_date >= start_date)
        if end_date:
            query = query.filter(BlockedDate.blocked_date <= end_date)
        return query.order_by(BlockedDate.blocked_date.asc()).all()

    @staticmethod
    def block_date(
            db: Session,
            business_id: UUID,
            blocked_date: date,
            staff_member_id: Optional[UUID] = None,
            reason: Optional[str] = None
    ) -> BlockedDate:
        if staff_member_id is not None:
            AvailabilityService.get_staff_member(db, business_id, staff_member_id)

        blocked = BlockedDate(
            business_id=business_id,
            staff_member_id=staff_member_id,
            blocked_date=blocked_date,
            reason=reason,
        )
        db.add(blocked)
        db.commit()
        db.refresh(blocked)

        logger.info(f"Blocked {blocked_date} for business {business_id} (staff={staff_member_id})")
        return blocked

    @staticmethod
    def unblock_date(db: Session, business_id: UUID, blocked_date_id: UUID) -> None:
        blocked = db.query(BlockedDate).filter(
            BlockedDate.id == blocked_date_id,
            BlockedDate.business_id == business_id
        ).first()
        if not blocked:
            raise ResourceNotFoundError("Blocked date not found")
        db.delete(blocked)
        db.commit()
