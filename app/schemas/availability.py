"""Schemas for availability windows, blocked dates and slot queries"""
from datetime import date, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class AvailableSlotsResponse(BaseModel):
    """Bookable start times for one day; an empty list means fully booked"""
    date: date
    slots: List[str] = Field(default_factory=list, description="Start times as HH:MM")


def _whole_minute(v: Optional[time]) -> Optional[time]:
    # Stored windows are read back by the slot lookup as whole minutes
    if v is not None and (v.second or v.microsecond or v.tzinfo is not None):
        raise ValueError("Time must be in HH:MM format")
    return v


class WindowSpan(BaseModel):
    start_time: time = Field(..., description="Opening time (HH:MM)")
    end_time: time = Field(..., description="Closing time (HH:MM, latest 23:59)")
    is_active: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_precision(cls, v: time) -> time:
        return _whole_minute(v)

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, v: time, info) -> time:
        start_time = info.data.get("start_time")
        if start_time and v <= start_time:
            raise ValueError("End time must be after start time")
        return v


class WindowCreate(WindowSpan):
    day_of_week: int = Field(..., ge=0, le=6, description="Day of week (0=Sunday, 6=Saturday)")
    staff_member_id: Optional[UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "day_of_week": 0,
                "start_time": "09:00",
                "end_time": "17:00",
                "is_active": True
            }
        }


class WindowUpdate(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_active: Optional[bool] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_precision(cls, v: Optional[time]) -> Optional[time]:
        return _whole_minute(v)


class DayWindowsReplace(BaseModel):
    """Replaces every window of one weekday in a single call"""
    windows: List[WindowSpan] = Field(default_factory=list)
    staff_member_id: Optional[UUID] = None


class BlockedDateCreate(BaseModel):
    blocked_date: date
    staff_member_id: Optional[UUID] = None
    reason: Optional[str] = Field(None, max_length=200)
