"""
Pydantic schemas for Business profile and settings
"""
from pydantic import BaseModel, Field
from typing import Optional


class BusinessUpdate(BaseModel):
    """Editable profile fields"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=1000)


class BusinessSettingsUpdate(BaseModel):
    """Booking policy and WhatsApp switches; omitted fields are left unchanged"""
    buffer_minutes: Optional[int] = Field(None, ge=0, le=240)
    advance_booking_days: Optional[int] = Field(None, ge=0, le=365)
    cancellation_hours: Optional[int] = Field(None, ge=0, le=720)
    whatsapp_enabled: Optional[bool] = None
    auto_confirmation_enabled: Optional[bool] = None
    reminder_24h_enabled: Optional[bool] = None
    reminder_2h_enabled: Optional[bool] = None
    reminder_30m_enabled: Optional[bool] = None


class LinkSlugRequest(BaseModel):
    """Regenerate the public link from the (optionally new) business name"""
    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
