# ============================================================================
# FILE: app/models/team.py
# Team access to a business: roles, member accounts and pending invitations
# ============================================================================
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timezone
import secrets
import uuid

from app.models.base import Base


class Permission:
    """What a role lets a team member do. Owners implicitly hold all of them."""
    READ = "read"        # GET dashboard routes
    WRITE = "write"      # POST / PUT / PATCH dashboard routes
    DELETE = "delete"    # DELETE dashboard routes
    REPORTS = "reports"  # analytics
    ADMIN = "admin"      # roles, members and invitations

    ALL = (READ, WRITE, DELETE, REPORTS, ADMIN)


# Seeded the first time a business looks at its roles
DEFAULT_ROLES = (
    ("Administrator", "Full access to the business",
     [Permission.READ, Permission.WRITE, Permission.DELETE, Permission.REPORTS, Permission.ADMIN]),
    ("Manager", "Appointments, schedules and reports",
     [Permission.READ, Permission.WRITE, Permission.REPORTS]),
    ("Staff", "Day-to-day appointment handling",
     [Permission.READ, Permission.WRITE]),
)


class Role(Base):
    __tablename__ = "roles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    permissions = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("business_id", "name", name="uq_roles_business_name"),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "permissions": list(self.permissions or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Role(name={self.name}, permissions={self.permissions})>"


class TeamMemberStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"

    ALL = (ACTIVE, INACTIVE)


class TeamMember(Base):
    """A non-owner account that works inside one business"""
    __tablename__ = "team_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    # One business per member account, as with owners
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    role_id = Column(UUID(as_uuid=True), ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)
    invited_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    status = Column(String(20), nullable=False, default=TeamMemberStatus.ACTIVE)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id])
    role = relationship("Role")
    business = relationship("Business")

    def has_permission(self, permission: str) -> bool:
        if self.status != TeamMemberStatus.ACTIVE or self.role is None:
            return False
        return permission in (self.role.permissions or [])

    def to_dict(self):
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "email": self.user.email if self.user else None,
            "full_name": self.user.full_name if self.user else None,
            "role_id": str(self.role_id) if self.role_id else None,
            "role_name": self.role.name if self.role else None,
            "permissions": list(self.role.permissions or []) if self.role else [],
            "status": self.status,
            "notes": self.notes,
            "last_login_at": self.user.last_login_at.isoformat() if self.user and self.user.last_login_at else None,
            "joined_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<TeamMember(user_id={self.user_id}, business_id={self.business_id}, status={self.status})>"


class InvitationStatus:
    PENDING = "pending"
    ACCEPTED = "accepted"
    REVOKED = "revoked"
    EXPIRED = "expired"


class TeamInvitation(Base):
    __tablename__ = "team_invitations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    role_id = Column(UUID(as_uuid=True), ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)
    invited_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    email = Column(String(255), nullable=False, index=True)  # stored lower-cased
    token = Column(String(64), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=InvitationStatus.PENDING)

    invited_at = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)

    role = relationship("Role")
    business = relationship("Business")

    @staticmethod
    def generate_token() -> str:
        return secrets.token_urlsafe(32)

    def is_expired(self) -> bool:
        expires_at = self.expires_at
        # SQLite hands timestamps back without tzinfo; they are stored in UTC
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) >= expires_at

    def to_dict(self):
        return {
            "id": str(self.id),
            "email": self.email,
            "role_id": str(self.role_id) if self.role_id else None,
            "role_name": self.role.name if self.role else None,
            "status": self.status,
            "invited_at": self.invited_at.isoformat() if self.invited_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "accepted_at": self.accepted_at.isoformat() if self.accepted_at else None,
        }

    def __repr__(self):
        return f"<TeamInvitation {self.token[:8]}... for {self.email} ({self.status})>"
