from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from models import BoardMemberRole


class BoardMember(BaseModel):
    id: int
    name: str
    role: BoardMemberRole
    title: Optional[str] = None
    affiliation: Optional[str] = None
    specialty: Optional[str] = None
    email: Optional[str] = None
    orcid_id: Optional[str] = None
    photo_url: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BoardMemberCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    role: BoardMemberRole
    title: Optional[str] = None
    affiliation: Optional[str] = None
    specialty: Optional[str] = None
    email: Optional[EmailStr] = None
    orcid_id: Optional[str] = None
    photo_url: Optional[str] = None
    display_order: int = 0
    is_active: bool = True


class BoardMemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[BoardMemberRole] = None
    title: Optional[str] = None
    affiliation: Optional[str] = None
    specialty: Optional[str] = None
    email: Optional[EmailStr] = None
    orcid_id: Optional[str] = None
    photo_url: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
