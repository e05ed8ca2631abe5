"""Schemas for roles, team members and invitations"""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.team import Permission, TeamMemberStatus


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permissions: List[str] = Field(..., min_length=1, description=f"Any of: {', '.join(Permission.ALL)}")

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: List[str]) -> List[str]:
        unknown = sorted(set(v) - set(Permission.ALL))
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(unknown)}")
        return v


class MemberUpdate(BaseModel):
    role_id: Optional[UUID] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TeamMemberStatus.ALL:
            raise ValueError(f"Status must be one of: {', '.join(TeamMemberStatus.ALL)}")
        return v


class InvitationCreate(BaseModel):
    email: EmailStr
    role_id: UUID
