"""Schemas for booking and managing appointments"""
from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.appointment import AppointmentStatus
from app.services.availability.time_of_day import InvalidTimeError, TimeOfDay


def _hhmm(v: str) -> str:
    try:
        return str(TimeOfDay.parse(v))
    except InvalidTimeError:
        raise ValueError("Time must be in HH:MM format")


class AppointmentCreate(BaseModel):
    """Dashboard booking made by the owner"""
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_phone: Optional[str] = Field(None, max_length=30)
    date: date
    time: str = Field(..., description="Start time (HH:MM)")
    service_id: Optional[UUID] = None
    staff_member_id: Optional[UUID] = None
    service_description: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _hhmm(v)


class PublicBookingRequest(AppointmentCreate):
    """Customer booking through the public link; a phone number is required"""
    customer_phone: str = Field(..., min_length=7, max_length=30)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_name": "Dana Levi",
                "customer_phone": "050-1234567",
                "date": "2025-06-01",
                "time": "10:30",
                "service_id": "5f0c6f3e-7d7b-4a55-9a57-3a3c1e2e9b10"
            }
        }


class AppointmentUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in AppointmentStatus.ALL:
            raise ValueError(f"Status must be one of: {', '.join(AppointmentStatus.ALL)}")
        return v


class AppointmentReschedule(BaseModel):
    date: date
    time: str = Field(..., description="New start time (HH:MM)")
    staff_member_id: Optional[UUID] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _hhmm(v)


class PublicCancelRequest(BaseModel):
    """The customer proves ownership with the phone used to book"""
    customer_phone: str
    reason: Optional[str] = Field(None, max_length=500)


class AppointmentCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class PublicRescheduleRequest(AppointmentReschedule):
    customer_phone: str
