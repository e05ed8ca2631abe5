# ============================================================================
# FILE: app/services/team/member_service.py
# Team members: the accounts that work inside a business besides its owner
# ============================================================================
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.models.business import Business
from app.models.team import TeamMember, TeamMemberStatus
from app.services.business.business_service import BusinessService
from app.services.exceptions import BookingError, ResourceNotFoundError
from app.services.team.role_service import RoleService

logger = logging.getLogger(__name__)


class MemberService:

    @staticmethod
    def get_active_membership(db: Session, user_id: UUID) -> Optional[TeamMember]:
        return db.query(TeamMember).filter(
            TeamMember.user_id == user_id,
            TeamMember.status == TeamMemberStatus.ACTIVE
        ).first()

    @staticmethod
    def business_for_user(db: Session, user_id: UUID) -> Optional[Business]:
        """The business a user works in: the one they own, else their active membership's."""
        business = BusinessService.get_business_by_owner(db, user_id)
        if business is not None:
            return business

        membership = MemberService.get_active_membership(db, user_id)
        return membership.business if membership else None

    @staticmethod
    def list_members(db: Session, business_id: UUID) -> List[TeamMember]:
        return db.query(TeamMember).filter(
            TeamMember.business_id == business_id
        ).order_by(TeamMember.created_at.asc()).all()

    @staticmethod
    def get_member(db: Session, business_id: UUID, member_id: UUID) -> TeamMember:
        member = db.query(TeamMember).filter(
            TeamMember.id == member_id,
            TeamMember.business_id == business_id
        ).first()
        if not member:
            raise ResourceNotFoundError("Team member not found")
        return member

    @staticmethod
    def update_member(db: Session, business_id: UUID, member_id: UUID, **changes) -> TeamMember:
        """Change a member's role, status or notes. Unset fields stay as they are."""
        member = MemberService.get_member(db, business_id, member_id)

        if changes.get("role_id") is not None:
            RoleService.get_role(db, business_id, changes["role_id"])
        if "status" in changes and changes["status"] not in TeamMemberStatus.ALL:
            raise BookingError(f"Status must be one of: {', '.join(TeamMemberStatus.ALL)}")

        for field, value in changes.items():
            setattr(member, field, value)

        db.commit()
        db.refresh(member)
        logger.info(f"Updated team member {member.id}: {sorted(changes)}")
        return member

    @staticmethod
    def remove_member(db: Session, business_id: UUID, member_id: UUID) -> None:
        """Drop the membership and deactivate the account, which exists only for this business."""
        member = MemberService.get_member(db, business_id, member_id)
        if member.user is not None:
            member.user.is_active = False
        db.delete(member)
        db.commit()
        logger.info(f"Removed team member {member_id} from business {business_id}")
