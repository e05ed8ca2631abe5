# app/services/catalog/staff_service.py
"""Staff members of a business"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.staff import StaffMember
from app.services.availability.availability_service import AvailabilityService
import logging

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "phone", "email", "role", "is_active")


class StaffService:

    @staticmethod
    def list_staff(db: Session, business_id: UUID, include_inactive: bool = False) -> List[StaffMember]:
        query = db.query(StaffMember).filter(StaffMember.business_id == business_id)
        if not include_inactive:
            query = query.filter(StaffMember.is_active == True)
        return query.order_by(StaffMember.name.asc()).all()

    @staticmethod
    def create_staff_member(
            db: Session,
            business_id: UUID,
            name: str,
            phone: Optional[str] = None,
            email: Optional[str] = None,
            role: Optional[str] = None
    ) -> StaffMember:
        staff = StaffMember(
            business_id=business_id,
            name=name,
            phone=phone,
            email=email,
            role=role,
            is_active=True,
        )
        db.add(staff)
        db.commit()
        db.refresh(staff)
        logger.info(f"Added staff member {staff.id} to business {business_id}")
        return staff

    @staticmethod
    def update_staff_member(db: Session, business_id: UUID, staff_member_id: UUID, **changes) -> StaffMember:
        staff = AvailabilityService.get_staff_member(db, business_id, staff_member_id)
        for field, value in changes.items():
            if field in EDITABLE_FIELDS:
                setattr(staff, field, value)
        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def deactivate_staff_member(db: Session, business_id: UUID, staff_member_id: UUID) -> StaffMember:
        """Soft delete; their appointments and windows stay for history"""
        staff = AvailabilityService.get_staff_member(db, business_id, staff_member_id)
        staff.is_active = False
        db.commit()
        db.refresh(staff)
        return staff
