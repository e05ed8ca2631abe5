# ============================================================================
# FILE: app/services/user/user_service.py
# User business logic - authentication and owner registration
# ============================================================================
from sqlalchemy.orm import Session
from typing import Optional, Tuple
from uuid import UUID

from app.models.business import Business
from app.models.user import User
from app.services.business.business_service import BusinessService
from app.utils.time_utils import utc_now


class UserService:
    """Service layer for user operations."""

    @staticmethod
    def create_user(
            db: Session,
            email: str,
            password: str,
            full_name: Optional[str] = None
    ) -> User:
        """
        Create a new user with hashed password.
        Raises ValueError if email already exists.
        """
        existing_user = UserService.get_user_by_email(db, email)
        if existing_user:
            raise ValueError("Email already registered")

        user = User(
            email=email.lower().strip(),
            hashed_password=User.hash_password(password),
            full_name=full_name,
            is_active=True
        )

        db.add(user)
        db.commit()
        db.refresh(user)

        return user

    @staticmethod
    def register_owner(
            db: Session,
            email: str,
            password: str,
            business_name: str,
            full_name: Optional[str] = None,
            phone_number: Optional[str] = None
    ) -> Tuple[User, Business]:
        """Sign-up: the owner account plus its business and default settings."""
        user = UserService.create_user(db, email, password, full_name)
        business = BusinessService.create_business(
            db,
            owner_id=user.id,
            name=business_name,
            phone_number=phone_number,
            email=user.email,
        )
        return user, business

    @staticmethod
    def authenticate_user(
            db: Session,
            email: str,
            password: str
    ) -> Optional[User]:
        """
        Authenticate a user by email and password.
        Returns User if valid, None if invalid credentials.
        """
        user = UserService.get_user_by_email(db, email)

        if not user:
            return None

        if not user.is_active:
            return None

        if not user.verify_password(password):
            return None

        user.last_login_at = utc_now()
        db.commit()

        return user

    @staticmethod
    def get_user_by_id(
            db: Session,
            user_id: UUID
    ) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(
            db: Session,
            email: str
    ) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower().strip()).first()
