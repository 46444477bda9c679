"""
User Service - Single source of truth for all user operations.

This service owns:
- User creation (with the profile and default role that come with it)
- Credential checks and password changes
- Role management
- User queries and listing

Authentication (tokens) is handled by auth_service.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, delete
from typing import Optional, List
from fastapi import Depends
from passlib.context import CryptContext
import logging

from models import (
    User as UserModel, UserRoleAssignment, Profile, AppRole, AccountStatus,
    default_notification_preferences,
)
from schemas.user import UserWithProfile
from database import get_async_db
from exceptions import ConflictError, NotFoundError, ValidationError
from utils.db_errors import is_unique_violation

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserService:
    """Service for user management operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Permission Helpers ====================

    def is_admin(self, user: UserModel) -> bool:
        return user.has_role(AppRole.ADMIN)

    def is_reviewer(self, user: UserModel) -> bool:
        return user.has_role(AppRole.REVIEWER)

    # ==================== Queries ====================

    async def get_user_by_id(self, user_id: int, refresh: bool = False) -> Optional[UserModel]:
        """Get user by ID. Pass refresh=True to reload roles changed in this session."""
        stmt = select(UserModel).where(UserModel.user_id == user_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_user_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.db.execute(
            select(UserModel).where(UserModel.email == email.lower())
        )
        return result.scalars().first()

    async def list_users(self) -> List[UserWithProfile]:
        """All users with their profile fields and roles, newest first."""
        result = await self.db.execute(
            select(UserModel, Profile)
            .outerjoin(Profile, Profile.user_id == UserModel.user_id)
            .order_by(UserModel.created_at.desc(), UserModel.user_id.desc())
        )
        return [
            UserWithProfile(
                user_id=user.user_id,
                email=user.email,
                full_name=profile.full_name if profile else None,
                username=profile.username if profile else None,
                account_status=profile.account_status if profile else None,
                roles=[AppRole(r) for r in user.role_names],
                created_at=user.created_at,
            )
            for user, profile in result.all()
        ]

    # ==================== Lifecycle ====================

    async def create_user(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> UserModel:
        """
        Create a user together with an unverified profile and the 'user' role.
        """
        email = email.lower()
        existing = await self.get_user_by_email(email)
        if existing:
            raise ValidationError("Email already registered")

        user = UserModel(
            email=email,
            password=pwd_context.hash(password),
            roles=[UserRoleAssignment(role=AppRole.USER)],
        )
        self.db.add(user)
        await self.db.flush()

        self.db.add(Profile(
            user_id=user.user_id,
            username=email.split('@')[0],
            full_name=full_name,
            account_status=AccountStatus.UNVERIFIED,
            notification_preferences=default_notification_preferences(),
        ))
        await self.db.commit()

        logger.info(f"Created user: {email} (id={user.user_id})")
        return await self.get_user_by_id(user.user_id, refresh=True)

    async def verify_credentials(self, email: str, password: str) -> Optional[UserModel]:
        """Return the active user for these credentials, or None."""
        user = await self.get_user_by_email(email)
        if not user or not user.is_active:
            return None
        if not pwd_context.verify(password, user.password):
            return None
        return user

    async def update_password(self, user: UserModel, new_password: str) -> UserModel:
        user.password = pwd_context.hash(new_password)
        await self.db.commit()
        logger.info(f"Password updated for user_id={user.user_id}")
        return user

    # ==================== Roles ====================

    async def assign_role(self, user_id: int, role: AppRole) -> UserModel:
        """Grant a role. Granting a role the user already holds is a conflict."""
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        self.db.add(UserRoleAssignment(user_id=user_id, role=role))
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                raise ConflictError("User already has this role")
            raise

        logger.info(f"Assigned role {role.value} to user_id={user_id}")
        return await self.get_user_by_id(user_id, refresh=True)

    async def remove_role(self, user_id: int, role: AppRole) -> UserModel:
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        await self.db.execute(
            delete(UserRoleAssignment).where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.role == role,
            )
        )
        await self.db.commit()

        logger.info(f"Removed role {role.value} from user_id={user_id}")
        return await self.get_user_by_id(user_id, refresh=True)


# Dependency injection provider for async user service
async def get_user_service(
    db: AsyncSession = Depends(get_async_db)
) -> UserService:
    """Get a UserService instance with async database session."""
    return UserService(db)
