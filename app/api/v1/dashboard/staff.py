# app/api/v1/dashboard/staff.py
"""Staff member management"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID

from app.api.dependencies import get_current_business
from app.config.database import get_db
from app.models.business import Business
from app.schemas.catalog import StaffCreate, StaffUpdate
from app.services.catalog.staff_service import StaffService

router = APIRouter(prefix="/staff", tags=["dashboard-staff"])


@router.get("")
def list_staff(
        include_inactive: bool = Query(False),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    staff = StaffService.list_staff(db, business.id, include_inactive)
    return {"total": len(staff), "staff": [s.to_dict() for s in staff]}


@router.post("", status_code=201)
def create_staff_member(
        staff_data: StaffCreate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    staff = StaffService.create_staff_member(db, business.id, **staff_data.model_dump())
    return staff.to_dict()


@router.patch("/{staff_member_id}")
def update_staff_member(
        staff_member_id: UUID,
        staff_data: StaffUpdate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    staff = StaffService.update_staff_member(
        db, business.id, staff_member_id, **staff_data.model_dump(exclude_unset=True)
    )
    return staff.to_dict()


@router.delete("/{staff_member_id}")
def deactivate_staff_member(
        staff_member_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    staff = StaffService.deactivate_staff_member(db, business.id, staff_member_id)
    return {"message": "Staff member deactivated", "staff": staff.to_dict()}
