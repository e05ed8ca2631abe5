# app/api/v1/dashboard/availability.py
"""Weekly availability windows and blocked dates"""
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from app.api.dependencies import get_current_business
from app.config.database import get_db
from app.models.business import Business
from app.schemas.availability import BlockedDateCreate, DayWindowsReplace, WindowCreate, WindowUpdate
from app.services.availability.schedule_service import ScheduleService

router = APIRouter(prefix="/availability", tags=["dashboard-availability"])


@router.get("/windows")
def list_windows(
        staff_member_id: Optional[UUID] = Query(None),
        day_of_week: Optional[int] = Query(None, ge=0, le=6, description="0=Sunday, 6=Saturday"),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    windows = ScheduleService.list_windows(db, business.id, staff_member_id, day_of_week)
    return {"total": len(windows), "windows": [w.to_dict() for w in windows]}


@router.post("/windows", status_code=201)
def create_window(
        window_data: WindowCreate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    window = ScheduleService.create_window(
        db,
        business.id,
        day=window_data.day_of_week,
        start_time=window_data.start_time,
        end_time=window_data.end_time,
        staff_member_id=window_data.staff_member_id,
        is_active=window_data.is_active,
    )
    return window.to_dict()


@router.patch("/windows/{window_id}")
def update_window(
        window_id: UUID,
        window_data: WindowUpdate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    window = ScheduleService.update_window(
        db, business.id, window_id, **window_data.model_dump(exclude_unset=True)
    )
    return window.to_dict()


@router.delete("/windows/{window_id}", status_code=204)
def delete_window(
        window_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    ScheduleService.delete_window(db, business.id, window_id)


@router.put("/days/{day_of_week}")
def replace_day(
        replacement: DayWindowsReplace,
        day_of_week: int = Path(..., ge=0, le=6, description="0=Sunday, 6=Saturday"),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """Set the complete list of windows for one weekday. An empty list closes the day."""
    windows = ScheduleService.replace_day(
        db,
        business.id,
        day_of_week,
        [w.model_dump() for w in replacement.windows],
        replacement.staff_member_id,
    )
    return {"day_of_week": day_of_week, "windows": [w.to_dict() for w in windows]}


@router.get("/blocked-dates")
def list_blocked_dates(
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    blocked = ScheduleService.list_blocked_dates(db, business.id, start_date, end_date)
    return {"total": len(blocked), "blocked_dates": [b.to_dict() for b in blocked]}


@router.post("/blocked-dates", status_code=201)
def block_date(
        blocked_data: BlockedDateCreate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    blocked = ScheduleService.block_date(
        db,
        business.id,
        blocked_data.blocked_date,
        staff_member_id=blocked_data.staff_member_id,
        reason=blocked_data.reason,
    )
    return blocked.to_dict()


@router.delete("/blocked-dates/{blocked_date_id}", status_code=204)
def unblock_date(
        blocked_date_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    ScheduleService.unblock_date(db, business.id, blocked_date_id)
