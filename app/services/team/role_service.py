# ============================================================================
# FILE: app/services/team/role_service.py
# Per-business roles that bundle dashboard permissions
# ============================================================================
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.models.team import DEFAULT_ROLES, InvitationStatus, Permission, Role, TeamInvitation, TeamMember
from app.services.exceptions import BookingError, ResourceNotFoundError

logger = logging.getLogger(__name__)


class RoleService:

    @staticmethod
    def ensure_default_roles(db: Session, business_id: UUID) -> None:
        """Seed Administrator / Manager / Staff for a business that has no roles yet."""
        if db.query(Role.id).filter(Role.business_id == business_id).first():
            return

        for name, description, permissions in DEFAULT_ROLES:
            db.add(Role(business_id=business_id, name=name, description=description, permissions=list(permissions)))
        db.commit()
        logger.info(f"Seeded default roles for business {business_id}")

    @staticmethod
    def list_roles(db: Session, business_id: UUID) -> List[Role]:
        RoleService.ensure_default_roles(db, business_id)
        return db.query(Role).filter(Role.business_id == business_id).order_by(Role.name.asc()).all()

    @staticmethod
    def get_role(db: Session, business_id: UUID, role_id: UUID) -> Role:
        role = db.query(Role).filter(Role.id == role_id, Role.business_id == business_id).first()
        if not role:
            raise ResourceNotFoundError("Role not found")
        return role

    @staticmethod
    def create_role(
            db: Session,
            business_id: UUID,
            name: str,
            permissions: List[str],
            description: Optional[str] = None
    ) -> Role:
        unknown = sorted(set(permissions) - set(Permission.ALL))
        if unknown:
            raise BookingError(f"Unknown permissions: {', '.join(unknown)}")
        if not permissions:
            raise BookingError("A role needs at least one permission")

        RoleService.ensure_default_roles(db, business_id)
        name = name.strip()
        if db.query(Role.id).filter(Role.business_id == business_id, Role.name == name).first():
            raise BookingError(f"A role named '{name}' already exists")

        # Keep the canonical order regardless of how the request listed them
        role = Role(
            business_id=business_id,
            name=name,
            description=description,
            permissions=[p for p in Permission.ALL if p in permissions],
        )
        db.add(role)
        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def delete_role(db: Session, business_id: UUID, role_id: UUID) -> None:
        role = RoleService.get_role(db, business_id, role_id)

        in_use = db.query(TeamMember.id).filter(TeamMember.role_id == role.id).first() or \
            db.query(TeamInvitation.id).filter(
                TeamInvitation.role_id == role.id,
                TeamInvitation.status == InvitationStatus.PENDING
            ).first()
        if in_use:
            raise BookingError("Role is assigned to team members or pending invitations")

        db.delete(role)
        db.commit()
