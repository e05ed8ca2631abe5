# app/services/catalog/service_catalog_service.py
"""Bookable services and which staff members perform them"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.service import Service
from app.models.staff import StaffMember
from app.services.exceptions import BookingError, ServiceNotFoundError, StaffNotFoundError
import logging

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description", "duration_minutes", "price", "color", "is_active")


class ServiceCatalogService:

    @staticmethod
    def list_services(db: Session, business_id: UUID, include_inactive: bool = False) -> List[Service]:
        query = db.query(Service).filter(Service.business_id == business_id)
        if not include_inactive:
            query = query.filter(Service.is_active == True)
        return query.order_by(Service.name.asc()).all()

    @staticmethod
    def get_service(db: Session, business_id: UUID, service_id: UUID) -> Service:
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.business_id == business_id
        ).first()
        if not service:
            raise ServiceNotFoundError("Service not found")
        return service

    @staticmethod
    def create_service(
            db: Session,
            business_id: UUID,
            name: str,
            duration_minutes: Optional[int] = None,
            description: Optional[str] = None,
            price=None,
            color: Optional[str] = None,
            assigned_staff_ids: Optional[List[UUID]] = None
    ) -> Service:
        if duration_minutes is not None and duration_minutes <= 0:
            raise BookingError("Service duration must be positive")

        service = Service(
            business_id=business_id,
            name=name,
            description=description,
            duration_minutes=duration_minutes,
            price=price,
            color=color,
            is_active=True,
        )
        if assigned_staff_ids:
            service.staff_members = ServiceCatalogService._load_staff(db, business_id, assigned_staff_ids)

        db.add(service)
        db.commit()
        db.refresh(service)

        logger.info(f"Created service {service.id} ({service.name}) for business {business_id}")
        return service

    @staticmethod
    def update_service(
            db: Session,
            business_id: UUID,
            service_id: UUID,
            assigned_staff_ids: Optional[List[UUID]] = None,
            **changes
    ) -> Service:
        service = ServiceCatalogService.get_service(db, business_id, service_id)

        if changes.get("duration_minutes") is not None and changes["duration_minutes"] <= 0:
            raise BookingError("Service duration must be positive")

        for field, value in changes.items():
            if field in EDITABLE_FIELDS:
                setattr(service, field, value)

        if assigned_staff_ids is not None:
            service.staff_members = ServiceCatalogService._load_staff(db, business_id, assigned_staff_ids)

        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def deactivate_service(db: Session, business_id: UUID, service_id: UUID) -> Service:
        """Soft delete: existing appointments keep pointing at the row"""
        service = ServiceCatalogService.get_service(db, business_id, service_id)
        service.is_active = False
        service.staff_members = []
        db.commit()
        db.refresh(service)
        logger.info(f"Deactivated service {service_id}")
        return service

    @staticmethod
    def get_assigned_staff(db: Session, business_id: UUID, service_id: UUID) -> List[StaffMember]:
        return list(ServiceCatalogService.get_service(db, business_id, service_id).staff_members)

    @staticmethod
    def set_assigned_staff(
            db: Session,
            business_id: UUID,
            service_id: UUID,
            staff_ids: List[UUID]
    ) -> List[StaffMember]:
        service = ServiceCatalogService.get_service(db, business_id, service_id)
        service.staff_members = ServiceCatalogService._load_staff(db, business_id, staff_ids)
        db.commit()
        db.refresh(service)
        return list(service.staff_members)

    @staticmethod
    def _load_staff(db: Session, business_id: UUID, staff_ids: List[UUID]) -> List[StaffMember]:
        wanted = set(staff_ids)
        if not wanted:
            return []
        staff = db.query(StaffMember).filter(
            StaffMember.id.in_(list(wanted)),
            StaffMember.business_id == business_id
        ).all()
        if len(staff) != len(wanted):
            raise StaffNotFoundError("One or more staff members not found")
        return staff
