# app/api/v1/dashboard/business.py
"""Business profile, booking settings and the public link slug"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_business
from app.config.database import get_db
from app.models.business import Business
from app.schemas.business import BusinessSettingsUpdate, BusinessUpdate, LinkSlugRequest
from app.services.business.business_service import BusinessService

router = APIRouter(prefix="/business", tags=["dashboard-business"])


@router.get("")
def get_business(business: Business = Depends(get_current_business)):
    return business.to_dict()


@router.patch("")
def update_business(
        business_data: BusinessUpdate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    business = BusinessService.update_business(db, business, **business_data.model_dump(exclude_unset=True))
    return business.to_dict()


@router.get("/settings")
def get_settings(
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    return BusinessService.get_settings(db, business.id).to_dict()


@router.patch("/settings")
def update_settings(
        settings_data: BusinessSettingsUpdate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    changes = settings_data.model_dump(exclude_unset=True, exclude_none=True)
    return BusinessService.update_settings(db, business.id, changes).to_dict()


@router.post("/link-slug")
def generate_link_slug(
        request: LinkSlugRequest,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """Derive a fresh, unique public link from the business name."""
    business = BusinessService.regenerate_link_slug(db, business, request.business_name)
    return {"link_slug": business.link_slug, "business": business.to_dict()}
