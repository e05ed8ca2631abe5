# ============================================================================
# FILE: app/api/v1/public/auth.py
# Public authentication endpoints - register, login, current user, team invitations
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
import logging

from app.api.dependencies import (
    get_db,
    get_current_user,
    create_access_token,
)
from app.services.team.invitation_service import InvitationService
from app.services.team.member_service import MemberService
from app.services.user.user_service import UserService
from app.models.user import User

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


# ============================================================================
# Pydantic Schemas
# ============================================================================

class RegisterRequest(BaseModel):
    """Request body for owner sign-up."""
    email: EmailStr
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")
    full_name: Optional[str] = None
    business_name: str = Field(..., min_length=1, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "owner@example.com",
                "password": "SecurePass123!",
                "full_name": "Noa Cohen",
                "business_name": "Noa's Studio"
            }
        }


class LoginRequest(BaseModel):
    """Request body for login."""
    email: EmailStr
    password: str


class AcceptInvitationRequest(BaseModel):
    """Request body for signing up through a team invitation."""
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")
    full_name: Optional[str] = Field(None, max_length=255)


class TokenResponse(BaseModel):
    """Response with the access token."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    full_name: Optional[str] = None
    business_id: Optional[str] = None
    link_slug: Optional[str] = None


def _token_response(user: User, business) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id),
        user_id=str(user.id),
        email=user.email,
        full_name=user.full_name,
        business_id=str(business.id) if business else None,
        link_slug=business.link_slug if business else None,
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create an owner account together with its business."""
    try:
        user, business = UserService.register_owner(
            db,
            email=request.email,
            password=request.password,
            business_name=request.business_name,
            full_name=request.full_name,
            phone_number=request.phone_number,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(f"Registered owner {user.email} with business {business.id}")
    return _token_response(user, business)


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = UserService.authenticate_user(db, request.email, request.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _token_response(user, MemberService.business_for_user(db, user.id))


@router.get("/me")
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    business = MemberService.business_for_user(db, current_user.id)
    membership = MemberService.get_active_membership(db, current_user.id)
    return {
        **current_user.to_dict(),
        "business": business.to_dict() if business else None,
        "membership": membership.to_dict() if membership else None,
    }


@router.get("/invitations/{token}")
def preview_invitation(token: str, db: Session = Depends(get_db)):
    """What the sign-up page shows before an invitee sets a password."""
    invitation = InvitationService.find_open_invitation(db, token)
    return {
        "email": invitation.email,
        "business_name": invitation.business.name if invitation.business else None,
        "role_name": invitation.role.name if invitation.role else None,
        "expires_at": invitation.expires_at.isoformat(),
    }


@router.post("/accept-invitation", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def accept_invitation(request: AcceptInvitationRequest, db: Session = Depends(get_db)):
    """Create a team member account from an invite link and sign it in."""
    user, member = InvitationService.accept_invitation(
        db,
        token=request.token,
        password=request.password,
        full_name=request.full_name,
    )
    logger.info(f"Team member {user.email} joined business {member.business_id}")
    return _token_response(user, member.business)
