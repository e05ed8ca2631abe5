# app/services/business/business_service.py
"""Service for managing business operations"""
import re
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.business import Business, BusinessSettings
from app.services.exceptions import BookingError, BusinessNotFoundError
import logging

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 50

SETTINGS_FIELDS = (
    "buffer_minutes",
    "advance_booking_days",
    "cancellation_hours",
    "whatsapp_enabled",
    "auto_confirmation_enabled",
    "reminder_24h_enabled",
    "reminder_2h_enabled",
    "reminder_30m_enabled",
)

PROFILE_FIELDS = ("name", "phone_number", "email", "address", "description")


def slugify(name: str) -> str:
    """'My Salon!' -> 'my-salon'"""
    slug = name.lower()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug[:SLUG_MAX_LENGTH].strip("-")


class BusinessService:
    """Handles business-related operations"""

    @staticmethod
    def create_business(
            db: Session,
            owner_id: UUID,
            name: str,
            phone_number: Optional[str] = None,
            email: Optional[str] = None,
            address: Optional[str] = None
    ) -> Business:
        """Create a tenant with default settings and a public link slug"""
        business = Business(
            owner_id=owner_id,
            name=name,
            phone_number=phone_number,
            email=email,
            address=address,
            link_slug=BusinessService.generate_unique_slug(db, name),
        )
        business.settings = BusinessSettings()
        db.add(business)
        db.commit()
        db.refresh(business)

        logger.info(f"Created business {business.id} ({business.link_slug}) for owner {owner_id}")
        return business

    @staticmethod
    def get_business_by_owner(db: Session, owner_id: UUID) -> Optional[Business]:
        return db.query(Business).filter(Business.owner_id == owner_id).first()

    @staticmethod
    def get_business_by_slug(db: Session, link_slug: str) -> Business:
        business = db.query(Business).filter(
            Business.link_slug == link_slug,
            Business.is_active == True
        ).first()
        if not business:
            raise BusinessNotFoundError("Business not found")
        return business

    @staticmethod
    def update_business(db: Session, business: Business, **changes) -> Business:
        for field, value in changes.items():
            if field in PROFILE_FIELDS:
                setattr(business, field, value)
        db.commit()
        db.refresh(business)
        return business

    @staticmethod
    def generate_unique_slug(db: Session, name: str, exclude_business_id: Optional[UUID] = None) -> str:
        """Slug of the name, suffixed -1, -2, ... until no other business holds it"""
        base_slug = slugify(name) or "business"
        candidate = base_slug
        counter = 1

        while True:
            query = db.query(Business.id).filter(Business.link_slug == candidate)
            if exclude_business_id is not None:
                query = query.filter(Business.id != exclude_business_id)
            if query.first() is None:
                return candidate
            candidate = f"{base_slug}-{counter}"
            counter += 1

    @staticmethod
    def regenerate_link_slug(db: Session, business: Business, name: Optional[str] = None) -> Business:
        if name:
            business.name = name
        business.link_slug = BusinessService.generate_unique_slug(db, business.name, business.id)
        db.commit()
        db.refresh(business)
        logger.info(f"Business {business.id} link slug is now {business.link_slug}")
        return business

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @staticmethod
    def get_settings(db: Session, business_id: UUID) -> BusinessSettings:
        row = db.query(BusinessSettings).filter(BusinessSettings.business_id == business_id).first()
        if not row:
            # Tenants created before settings existed get defaults on first read
            row = BusinessSettings(business_id=business_id)
            db.add(row)
            db.commit()
            db.refresh(row)
        return row

    @staticmethod
    def update_settings(db: Session, business_id: UUID, changes: Dict[str, Any]) -> BusinessSettings:
        row = BusinessService.get_settings(db, business_id)

        for field, value in changes.items():
            if field not in SETTINGS_FIELDS:
                raise BookingError(f"Unknown setting: {field}")
            setattr(row, field, value)

        if row.buffer_minutes < 0 or row.advance_booking_days < 0 or row.cancellation_hours < 0:
            db.rollback()
            raise BookingError("Settings values cannot be negative")

        db.commit()
        db.refresh(row)
        return row
