# app/api/v1/dashboard/team.py
"""Roles, team members and invitations. Owners and members with "admin" only."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from uuid import UUID

from app.api.dependencies import get_current_business, get_current_user, require_permission
from app.config.database import get_db
from app.models.business import Business
from app.models.team import Permission
from app.models.user import User
from app.schemas.team import InvitationCreate, MemberUpdate, RoleCreate
from app.services.team.invitation_service import InvitationService
from app.services.team.member_service import MemberService
from app.services.team.role_service import RoleService

router = APIRouter(
    prefix="/team",
    tags=["dashboard-team"],
    dependencies=[Depends(require_permission(Permission.ADMIN))]
)


def _invitation_payload(invitation) -> dict:
    return {**invitation.to_dict(), "invite_url": InvitationService.invite_url(invitation)}


# ============================================================================
# Roles
# ============================================================================

@router.get("/roles")
def list_roles(business: Business = Depends(get_current_business), db: Session = Depends(get_db)):
    roles = RoleService.list_roles(db, business.id)
    return {"total": len(roles), "roles": [r.to_dict() for r in roles]}


@router.post("/roles", status_code=status.HTTP_201_CREATED)
def create_role(
        role_data: RoleCreate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    role = RoleService.create_role(db, business.id, **role_data.model_dump())
    return role.to_dict()


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(role_id: UUID, business: Business = Depends(get_current_business), db: Session = Depends(get_db)):
    RoleService.delete_role(db, business.id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Members
# ============================================================================

@router.get("/members")
def list_members(business: Business = Depends(get_current_business), db: Session = Depends(get_db)):
    members = MemberService.list_members(db, business.id)
    return {"total": len(members), "members": [m.to_dict() for m in members]}


@router.get("/members/{member_id}")
def get_member(member_id: UUID, business: Business = Depends(get_current_business), db: Session = Depends(get_db)):
    return MemberService.get_member(db, business.id, member_id).to_dict()


@router.patch("/members/{member_id}")
def update_member(
        member_id: UUID,
        member_data: MemberUpdate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    member = MemberService.update_member(db, business.id, member_id, **member_data.model_dump(exclude_unset=True))
    return member.to_dict()


@router.delete("/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(member_id: UUID, business: Business = Depends(get_current_business), db: Session = Depends(get_db)):
    MemberService.remove_member(db, business.id, member_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Invitations
# ============================================================================

@router.get("/invitations")
def list_invitations(
        include_closed: bool = Query(False, description="Also list accepted, revoked and expired invitations"),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    invitations = InvitationService.list_invitations(db, business.id, include_closed)
    return {"total": len(invitations), "invitations": [_invitation_payload(i) for i in invitations]}


@router.post("/invitations", status_code=status.HTTP_201_CREATED)
def create_invitation(
        invitation_data: InvitationCreate,
        current_user: User = Depends(get_current_user),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    invitation = InvitationService.create_invitation(
        db, business, invitation_data.email, invitation_data.role_id, invited_by=current_user.id
    )
    return _invitation_payload(invitation)


@router.post("/invitations/{invitation_id}/resend")
def resend_invitation(
        invitation_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    return _invitation_payload(InvitationService.resend_invitation(db, business.id, invitation_id))


@router.delete("/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_invitation(
        invitation_id: UUID,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    InvitationService.revoke_invitation(db, business.id, invitation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
