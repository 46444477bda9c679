from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime

from models import ApplicationStatus


class ReviewerApplication(BaseModel):
    id: int
    user_id: Optional[int] = None
    full_name: str
    email: EmailStr
    institution: str
    department: Optional[str] = None
    academic_title: str
    orcid_id: Optional[str] = None
    google_scholar_id: Optional[str] = None
    publications_count: int = 0
    expertise_areas: List[str] = []
    previous_review_experience: Optional[str] = None
    motivation: Optional[str] = None
    agreed_to_guidelines: bool
    agreed_to_confidentiality: bool
    status: ApplicationStatus
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewerApplicationCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    institution: str = Field(min_length=1, max_length=255)
    department: Optional[str] = None
    academic_title: str = Field(min_length=1, max_length=100)
    orcid_id: Optional[str] = None
    google_scholar_id: Optional[str] = None
    publications_count: int = Field(default=0, ge=0)
    expertise_areas: List[str] = Field(min_length=1)
    previous_review_experience: Optional[str] = None
    motivation: Optional[str] = None
    agreed_to_guidelines: bool
    agreed_to_confidentiality: bool

    @field_validator("agreed_to_guidelines", "agreed_to_confidentiality")
    @classmethod
    def must_agree(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must agree to the reviewer guidelines and confidentiality terms")
        return v


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    admin_notes: Optional[str] = None


class ApplicationStatusResponse(BaseModel):
    application: ReviewerApplication
    message: str
