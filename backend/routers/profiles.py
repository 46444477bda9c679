"""
Profile endpoints: the caller's own profile and public doctor profiles.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from exceptions import AppError
from models import User
from schemas.profile import (
    AvatarUploadResponse, DoctorProfile, DoctorProfileUpdate, MyProfile, NotificationPreferences,
    Profile, ProfileUpdate, PublicProfile,
)
from services import auth_service
from services.profile_service import ProfileService, get_profile_service
from services.storage_service import StorageService, get_storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("/me", response_model=MyProfile, summary="Get my profile")
async def get_my_profile(
    current_user: User = Depends(auth_service.validate_token),
    service: ProfileService = Depends(get_profile_service),
):
    """Profile, professional profile, roles and the last 10 logins."""
    return await service.get_my_profile(current_user)


@router.put("/me", response_model=Profile, summary="Update my personal profile")
async def update_my_profile(
    updates: ProfileUpdate,
    current_user: User = Depends(auth_service.validate_token),
    service: ProfileService = Depends(get_profile_service),
):
    try:
        return await service.update_profile(current_user.user_id, updates)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"update_my_profile failed for user {current_user.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile",
        )


@router.put("/me/notifications", response_model=Profile, summary="Update notification preferences")
async def update_notification_preferences(
    prefs: NotificationPreferences,
    current_user: User = Depends(auth_service.validate_token),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.update_notification_preferences(current_user.user_id, prefs)


@router.put("/me/doctor", response_model=DoctorProfile, summary="Create or update my professional profile")
async def update_doctor_profile(
    updates: DoctorProfileUpdate,
    current_user: User = Depends(auth_service.validate_token),
    service: ProfileService = Depends(get_profile_service),
):
    try:
        doctor, _ = await service.upsert_doctor_profile(current_user.user_id, updates)
        return doctor
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"update_doctor_profile failed for user {current_user.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update professional profile",
        )


@router.post("/me/avatar", response_model=AvatarUploadResponse, summary="Upload my avatar")
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(auth_service.validate_token),
    service: ProfileService = Depends(get_profile_service),
    storage: StorageService = Depends(get_storage_service),
):
    """Overwrites <user_id>/avatar.<ext> in the public image bucket."""
    data = await file.read()
    avatar_url = storage.upload_avatar(current_user.user_id, data, file.filename, file.content_type)
    await service.set_avatar_url(current_user.user_id, avatar_url)
    return AvatarUploadResponse(avatar_url=avatar_url)


@router.get("/doctors", response_model=List[PublicProfile], summary="List public doctor profiles")
async def list_public_doctors(service: ProfileService = Depends(get_profile_service)):
    return await service.list_public_doctors()


@router.get("/{username}", response_model=PublicProfile, summary="Get a public profile")
async def get_public_profile(
    username: str,
    viewer: Optional[User] = Depends(auth_service.get_optional_user),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.get_public_profile(username, viewer)
