"""
Profile Service - personal and professional profiles.

Personal profiles exist from signup. Doctor (professional) profiles are
created on first save and are visible to others only when the owner marks
them public.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import NotFoundError
from models import (
    AppRole, DoctorProfile, LoginActivity, Profile, User, AccountStatus,
    default_notification_preferences,
)
from schemas.profile import (
    DoctorProfile as DoctorProfileSchema, DoctorProfileUpdate, LoginActivity as LoginActivitySchema,
    MyProfile, NotificationPreferences, Profile as ProfileSchema, ProfileUpdate,
    PublicDoctorProfile, PublicProfile, PublicProfileInfo,
)

logger = logging.getLogger(__name__)

LOGIN_ACTIVITY_LIMIT = 10


class ProfileService:

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Loaders ====================

    async def get_profile(self, user_id: int) -> Optional[Profile]:
        result = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalars().first()

    async def get_or_create_profile(self, user_id: int) -> Profile:
        profile = await self.get_profile(user_id)
        if profile is None:
            profile = Profile(
                user_id=user_id,
                account_status=AccountStatus.UNVERIFIED,
                notification_preferences=default_notification_preferences(),
            )
            self.db.add(profile)
            await self.db.flush()
        return profile

    async def get_doctor_profile(self, user_id: int) -> Optional[DoctorProfile]:
        result = await self.db.execute(select(DoctorProfile).where(DoctorProfile.user_id == user_id))
        return result.scalars().first()

    async def get_login_activity(self, user_id: int) -> List[LoginActivity]:
        result = await self.db.execute(
            select(LoginActivity)
            .where(LoginActivity.user_id == user_id)
            .order_by(LoginActivity.login_at.desc(), LoginActivity.id.desc())
            .limit(LOGIN_ACTIVITY_LIMIT)
        )
        return list(result.scalars().all())

    # ==================== Views ====================

    async def get_my_profile(self, user: User) -> MyProfile:
        """Owner view, including the last ten logins."""
        profile = await self.get_profile(user.user_id)
        doctor = await self.get_doctor_profile(user.user_id)
        return MyProfile(
            profile=ProfileSchema.model_validate(profile) if profile else None,
            doctor_profile=DoctorProfileSchema.model_validate(doctor) if doctor else None,
            roles=[AppRole(r) for r in user.role_names],
            login_activity=[LoginActivitySchema.model_validate(a) for a in await self.get_login_activity(user.user_id)],
        )

    async def get_public_profile(self, username: str, viewer: Optional[User] = None) -> PublicProfile:
        """
        Public view by username. Login activity is never included.

        Raises:
            NotFoundError: Unknown username, or the professional profile is
                not public and the viewer is neither the owner nor an admin
        """
        result = await self.db.execute(select(Profile).where(Profile.username == username).order_by(Profile.id))
        profile = result.scalars().first()
        if profile is None:
            raise NotFoundError("Profile not found")

        doctor = await self.get_doctor_profile(profile.user_id)
        privileged = viewer is not None and (
            viewer.user_id == profile.user_id or viewer.has_role(AppRole.ADMIN)
        )
        if not privileged and (doctor is None or not doctor.is_public_profile):
            raise NotFoundError("Profile not found")

        owner = await self.db.get(User, profile.user_id)
        return PublicProfile(
            profile=PublicProfileInfo.model_validate(profile),
            doctor_profile=PublicDoctorProfile.model_validate(doctor) if doctor else None,
            roles=[AppRole(r) for r in owner.role_names] if owner else [],
        )

    async def list_public_doctors(self) -> List[PublicProfile]:
        result = await self.db.execute(
            select(DoctorProfile, Profile)
            .join(Profile, Profile.user_id == DoctorProfile.user_id)
            .where(DoctorProfile.is_public_profile == True)
            .order_by(Profile.full_name.asc(), Profile.id.asc())
        )
        return [
            PublicProfile(
                profile=PublicProfileInfo.model_validate(profile),
                doctor_profile=PublicDoctorProfile.model_validate(doctor),
            )
            for doctor, profile in result.all()
        ]

    # ==================== Mutations ====================

    async def update_profile(self, user_id: int, data: ProfileUpdate) -> Profile:
        profile = await self.get_or_create_profile(user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, field, value)
        await self.db.commit()
        await self.db.refresh(profile)
        logger.info(f"Profile updated for user {user_id}")
        return profile

    async def update_notification_preferences(self, user_id: int, prefs: NotificationPreferences) -> Profile:
        profile = await self.get_or_create_profile(user_id)
        profile.notification_preferences = prefs.model_dump()
        await self.db.commit()
        await self.db.refresh(profile)
        logger.info(f"Notification preferences updated for user {user_id}")
        return profile

    async def set_avatar_url(self, user_id: int, avatar_url: str) -> Profile:
        profile = await self.get_or_create_profile(user_id)
        profile.avatar_url = avatar_url
        await self.db.commit()
        await self.db.refresh(profile)
        return profile

    async def set_account_status(self, user_id: int, status: AccountStatus) -> Profile:
        profile = await self.get_or_create_profile(user_id)
        profile.account_status = status
        await self.db.commit()
        await self.db.refresh(profile)
        logger.info(f"Account status for user {user_id} -> {status.value}")
        return profile

    async def upsert_doctor_profile(self, user_id: int, data: DoctorProfileUpdate) -> Tuple[DoctorProfile, bool]:
        """Update the doctor profile, creating it first if needed. Returns (profile, created)."""
        doctor = await self.get_doctor_profile(user_id)
        created = doctor is None
        if created:
            doctor = DoctorProfile(user_id=user_id, is_public_profile=False)
            self.db.add(doctor)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(doctor, field, value)
        await self.db.commit()
        await self.db.refresh(doctor)
        logger.info(f"Doctor profile {'created' if created else 'updated'} for user {user_id}")
        return doctor, created


async def get_profile_service(
    db: AsyncSession = Depends(get_async_db)
) -> ProfileService:
    return ProfileService(db)
