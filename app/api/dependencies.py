# ============================================================================
# FILE: app/api/dependencies.py
# Request dependencies: owner JWT, tenant scoping, cron shared secret
# ============================================================================
from fastapi import Depends, HTTPException, Request, status, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from uuid import UUID
import hmac

from app.config.database import get_db
from app.config.settings import settings
from app.models.business import Business
from app.models.team import Permission
from app.models.user import User
from app.services.business.business_service import BusinessService
from app.services.team.member_service import MemberService
from app.services.user.user_service import UserService

owner_bearer = HTTPBearer(
    scheme_name="Owner JWT",
    description="Access token returned by /auth/login or /auth/register"
)

TOKEN_TYPE = "access"

# What a team member's role must grant for each kind of dashboard request
METHOD_PERMISSIONS = {
    "GET": Permission.READ,
    "HEAD": Permission.READ,
    "DELETE": Permission.DELETE,
}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Signed token whose subject is the owner's user id"""
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> UUID:
    """
    Validate signature, expiry and token type, and return the user id.

    Raises:
        HTTPException 401: anything wrong with the token
    """
    try:
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise _unauthorized(f"Could not validate credentials: {str(e)}")

    if claims.get("type") != TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    try:
        return UUID(claims.get("sub") or "")
    except ValueError:
        raise _unauthorized("Invalid user ID in token")


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(owner_bearer),
        db: Session = Depends(get_db)
) -> User:
    """The signed-in owner. Deactivated accounts are refused."""
    user = UserService.get_user_by_id(db, decode_access_token(credentials.credentials))
    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )
    return user


async def get_current_business(
        request: Request,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
) -> Business:
    """
    The business the signed-in user works in. Every dashboard route is
    scoped to it.

    Owners may do anything. Team members need the permission matching the
    HTTP method (read / write / delete) in their role.
    """
    business = BusinessService.get_business_by_owner(db, current_user.id)
    if business is not None:
        return business

    membership = MemberService.get_active_membership(db, current_user.id)
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No business found for this account"
        )

    required = METHOD_PERMISSIONS.get(request.method, Permission.WRITE)
    if not membership.has_permission(required):
        raise _forbidden(required)
    return membership.business


def _forbidden(permission: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"Insufficient permissions. Required permission: {permission}"
    )


def require_permission(permission: str):
    """Dependency factory for routes that need more than the method-level permission."""

    async def permission_checker(
            current_user: User = Depends(get_current_user),
            business: Business = Depends(get_current_business),
            db: Session = Depends(get_db)
    ) -> None:
        if business.owner_id == current_user.id:
            return None

        membership = MemberService.get_active_membership(db, current_user.id)
        if membership is None or not membership.has_permission(permission):
            raise _forbidden(permission)
        return None

    return permission_checker


async def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Scheduler calls must carry 'Authorization: Bearer <CRON_SECRET>'."""
    expected = f"Bearer {settings.CRON_SECRET}"
    if not settings.CRON_SECRET or not hmac.compare_digest(authorization or "", expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
