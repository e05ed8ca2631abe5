# app/api/v1/dashboard/services.py
"""
Service Management API Endpoints
Handles CRUD operations for business services and their staff assignments
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.api.dependencies import get_current_business
from app.config.database import get_db
from app.models.business import Business
from app.schemas.catalog import ServiceCreate, ServiceUpdate, StaffAssignment
from app.services.catalog.service_catalog_service import ServiceCatalogService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/services", tags=["dashboard-services"])


@router.get("")
def list_services(
        include_inactive: bool = Query(False, description="Include soft-deleted services"),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    services = ServiceCatalogService.list_services(db, business.id, include_inactive)
    return {"total": len(services), "services": [s.to_dict() for s in services]}


@router.post("", status_code=201)
def create_service(
        service_data: ServiceCreate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    service = ServiceCatalogService.create_service(
        db,
        business.id,
        name=service_data.name,
        duration_minutes=service_data.duration_minutes,
        description=service_data.description,
        price=service_data.price,
        color=service_data.color,
        assigned_staff_ids=service_data.assigned_staff_ids,
    )
    return service.to_dict()


@router.get("/{service_id}")
def get_service(
        service_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    return ServiceCatalogService.get_service(db, business.id, service_id).to_dict()


@router.patch("/{service_id}")
def update_service(
        service_id: UUID,
        service_data: ServiceUpdate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    changes = service_data.model_dump(exclude_unset=True)
    assigned_staff_ids = changes.pop("assigned_staff_ids", None)
    service = ServiceCatalogService.update_service(
        db, business.id, service_id, assigned_staff_ids=assigned_staff_ids, **changes
    )
    return service.to_dict()


@router.delete("/{service_id}")
def delete_service(
        service_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """Soft delete: the service disappears from booking but history keeps it."""
    service = ServiceCatalogService.deactivate_service(db, business.id, service_id)
    return {"message": "Service deleted", "service": service.to_dict()}


@router.get("/{service_id}/staff")
def get_service_staff(
        service_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    staff = ServiceCatalogService.get_assigned_staff(db, business.id, service_id)
    return {"service_id": str(service_id), "staff": [s.to_dict() for s in staff]}


@router.put("/{service_id}/staff")
def set_service_staff(
        service_id: UUID,
        assignment: StaffAssignment,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    staff = ServiceCatalogService.set_assigned_staff(db, business.id, service_id, assignment.staff_ids)
    return {"service_id": str(service_id), "staff": [s.to_dict() for s in staff]}
