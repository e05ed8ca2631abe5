# ============================================================================
# FILE: app/services/team/invitation_service.py
# Owners invite team members; the invitee signs up through the invite link
# ============================================================================
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import timedelta
import logging

from app.config.settings import get_settings
from app.models.business import Business
from app.models.team import InvitationStatus, TeamInvitation, TeamMember, TeamMemberStatus
from app.models.user import User
from app.services.exceptions import BookingError, ResourceNotFoundError
from app.services.team.role_service import RoleService
from app.services.user.user_service import UserService
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)
settings = get_settings()

INVITATION_LIFETIME = timedelta(days=7)


class InvitationService:
    """Service layer for team invitations (owner side and invitee side)."""

    @staticmethod
    def create_invitation(
            db: Session,
            business: Business,
            email: str,
            role_id: UUID,
            invited_by: UUID
    ) -> TeamInvitation:
        """
        Invite an email address into the business with the given role.

        Raises:
            ResourceNotFoundError: role is not one of this business's roles
            BookingError: the email already has an account or a pending invitation
        """
        email = email.lower().strip()
        role = RoleService.get_role(db, business.id, role_id)

        if UserService.get_user_by_email(db, email):
            raise BookingError("User already exists")

        InvitationService.expire_stale(db, business.id)
        pending = db.query(TeamInvitation.id).filter(
            TeamInvitation.business_id == business.id,
            TeamInvitation.email == email,
            TeamInvitation.status == InvitationStatus.PENDING
        ).first()
        if pending:
            raise BookingError("Invitation already sent")

        now = utc_now()
        invitation = TeamInvitation(
            business_id=business.id,
            email=email,
            role_id=role.id,
            token=TeamInvitation.generate_token(),
            status=InvitationStatus.PENDING,
            invited_by=invited_by,
            invited_at=now,
            expires_at=now + INVITATION_LIFETIME,
        )
        db.add(invitation)
        db.commit()
        db.refresh(invitation)

        logger.info(f"Created invitation {invitation.id} for {email} as {role.name} (business {business.id})")
        return invitation

    @staticmethod
    def invite_url(invitation: TeamInvitation) -> str:
        """Link the owner shares with the invitee"""
        return f"{settings.PUBLIC_APP_URL.rstrip('/')}/register?invite={invitation.token}"

    @staticmethod
    def expire_stale(db: Session, business_id: UUID) -> int:
        """Mark pending invitations past their expiry as expired."""
        expired = db.query(TeamInvitation).filter(
            TeamInvitation.business_id == business_id,
            TeamInvitation.status == InvitationStatus.PENDING,
            TeamInvitation.expires_at <= utc_now()
        ).update({TeamInvitation.status: InvitationStatus.EXPIRED}, synchronize_session=False)

        if expired:
            db.commit()
            logger.info(f"Expired {expired} invitations for business {business_id}")
        return expired

    @staticmethod
    def list_invitations(db: Session, business_id: UUID, include_closed: bool = False) -> List[TeamInvitation]:
        InvitationService.expire_stale(db, business_id)

        query = db.query(TeamInvitation).filter(TeamInvitation.business_id == business_id)
        if not include_closed:
            query = query.filter(TeamInvitation.status == InvitationStatus.PENDING)
        return query.order_by(TeamInvitation.invited_at.desc()).all()

    @staticmethod
    def get_invitation(db: Session, business_id: UUID, invitation_id: UUID) -> TeamInvitation:
        invitation = db.query(TeamInvitation).filter(
            TeamInvitation.id == invitation_id,
            TeamInvitation.business_id == business_id
        ).first()
        if not invitation:
            raise ResourceNotFoundError("Invitation not found")
        return invitation

    @staticmethod
    def revoke_invitation(db: Session, business_id: UUID, invitation_id: UUID) -> TeamInvitation:
        invitation = InvitationService.get_invitation(db, business_id, invitation_id)
        if invitation.status != InvitationStatus.PENDING:
            raise BookingError(f"Only pending invitations can be revoked (this one is {invitation.status})")

        invitation.status = InvitationStatus.REVOKED
        db.commit()
        db.refresh(invitation)
        return invitation

    @staticmethod
    def resend_invitation(db: Session, business_id: UUID, invitation_id: UUID) -> TeamInvitation:
        """Restart the expiry clock of a pending invitation so its link can be shared again."""
        invitation = InvitationService.get_invitation(db, business_id, invitation_id)
        if invitation.status != InvitationStatus.PENDING:
            raise ResourceNotFoundError("Invitation not found or already processed")

        if invitation.is_expired():
            invitation.status = InvitationStatus.EXPIRED
            db.commit()
            raise BookingError("Invitation has expired")

        invitation.expires_at = utc_now() + INVITATION_LIFETIME
        db.commit()
        db.refresh(invitation)
        logger.info(f"Renewed invitation {invitation.id} for {invitation.email}")
        return invitation

    @staticmethod
    def find_open_invitation(db: Session, token: str) -> TeamInvitation:
        """The pending, unexpired invitation behind an invite link."""
        invitation = db.query(TeamInvitation).filter(TeamInvitation.token == token).first()
        if not invitation:
            raise ResourceNotFoundError("Invitation not found")

        if invitation.status == InvitationStatus.PENDING and invitation.is_expired():
            invitation.status = InvitationStatus.EXPIRED
            db.commit()

        if invitation.status != InvitationStatus.PENDING:
            raise BookingError(f"Invitation is {invitation.status}")
        return invitation

    @staticmethod
    def accept_invitation(
            db: Session,
            token: str,
            password: str,
            full_name: Optional[str] = None
    ) -> Tuple[User, TeamMember]:
        """Create the invitee's account and membership in one transaction."""
        invitation = InvitationService.find_open_invitation(db, token)

        if UserService.get_user_by_email(db, invitation.email):
            raise BookingError("User already exists")

        user = User(
            email=invitation.email,
            hashed_password=User.hash_password(password),
            full_name=full_name,
            is_active=True,
        )
        db.add(user)
        db.flush()

        member = TeamMember(
            business_id=invitation.business_id,
            user_id=user.id,
            role_id=invitation.role_id,
            invited_by=invitation.invited_by,
            status=TeamMemberStatus.ACTIVE,
        )
        db.add(member)

        invitation.status = InvitationStatus.ACCEPTED
        invitation.accepted_at = utc_now()
        db.commit()
        db.refresh(member)

        logger.info(f"Invitation {invitation.id} accepted by {user.email}")
        return user, member
