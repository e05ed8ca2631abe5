"""Schemas for services and staff members"""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, gt=0, description="Duration in minutes")
    price: Optional[float] = Field(None, ge=0)
    color: Optional[str] = Field(None, max_length=20)
    assigned_staff_ids: Optional[List[UUID]] = None


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)
    color: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None
    assigned_staff_ids: Optional[List[UUID]] = None


class StaffAssignment(BaseModel):
    staff_ids: List[UUID] = Field(default_factory=list)


class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, max_length=100)


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
