"""
Profile schemas

Section order:
  1. Personal profile
  2. Professional (doctor) profile
  3. Composite views
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from models import AccountStatus, AppRole, Specialty


# ============================================================================
# PERSONAL PROFILE
# ============================================================================


class NotificationPreferences(BaseModel):
    email_submissions: bool = True
    email_reviews: bool = True
    email_publications: bool = True


class Profile(BaseModel):
    id: int
    user_id: int
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    id_number: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    bio: Optional[str] = None
    account_status: AccountStatus = AccountStatus.UNVERIFIED
    notification_preferences: Optional[NotificationPreferences] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Owner-editable fields. account_status is managed by admins only."""
    username: Optional[str] = Field(None, max_length=100)
    full_name: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = None
    id_number: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = None


class PublicProfileInfo(BaseModel):
    """Personal fields safe to show to anyone."""
    user_id: int
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    bio: Optional[str] = None

    class Config:
        from_attributes = True


# ============================================================================
# PROFESSIONAL PROFILE
# ============================================================================


class DoctorProfile(BaseModel):
    id: int
    user_id: int
    specialty: Optional[Specialty] = None
    academic_degree: Optional[str] = None
    university: Optional[str] = None
    hospital: Optional[str] = None
    years_of_experience: Optional[int] = None
    medical_license_number: Optional[str] = None
    research_interests: Optional[List[str]] = None
    spoken_languages: Optional[List[str]] = None
    is_public_profile: bool = False
    orcid_id: Optional[str] = None
    google_scholar_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicDoctorProfile(BaseModel):
    """Doctor profile without the license number."""
    specialty: Optional[Specialty] = None
    academic_degree: Optional[str] = None
    university: Optional[str] = None
    hospital: Optional[str] = None
    years_of_experience: Optional[int] = None
    research_interests: Optional[List[str]] = None
    spoken_languages: Optional[List[str]] = None
    orcid_id: Optional[str] = None
    google_scholar_id: Optional[str] = None

    class Config:
        from_attributes = True


class DoctorProfileUpdate(BaseModel):
    specialty: Optional[Specialty] = None
    academic_degree: Optional[str] = None
    university: Optional[str] = None
    hospital: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0, le=80)
    medical_license_number: Optional[str] = None
    research_interests: Optional[List[str]] = None
    spoken_languages: Optional[List[str]] = None
    is_public_profile: Optional[bool] = None
    orcid_id: Optional[str] = None
    google_scholar_id: Optional[str] = None


# ============================================================================
# COMPOSITE VIEWS
# ============================================================================


class LoginActivity(BaseModel):
    id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    login_at: datetime

    class Config:
        from_attributes = True


class MyProfile(BaseModel):
    """Everything the profile page shows its owner."""
    profile: Optional[Profile] = None
    doctor_profile: Optional[DoctorProfile] = None
    roles: List[AppRole] = []
    login_activity: List[LoginActivity] = []


class PublicProfile(BaseModel):
    profile: PublicProfileInfo
    doctor_profile: Optional[PublicDoctorProfile] = None
    roles: List[AppRole] = []


class AvatarUploadResponse(BaseModel):
    avatar_url: str
