"""
Submission schemas for the Journal Platform
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from models import SubmissionStatus
from schemas.article import Article


class SubmissionFileType(str, Enum):
    MANUSCRIPT = "manuscript"
    SUPPLEMENTARY = "supplementary"


class Submission(BaseModel):
    id: int
    user_id: int
    title: str
    abstract: str
    authors: str
    keywords: Optional[str] = None
    category: Optional[str] = None
    cover_letter: Optional[str] = None
    manuscript_url: Optional[str] = None
    supplementary_url: Optional[str] = None
    status: SubmissionStatus
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubmissionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    abstract: str = Field(min_length=1)
    authors: str = Field(min_length=1, max_length=1000)
    keywords: Optional[str] = None
    category: Optional[str] = None
    cover_letter: Optional[str] = None
    manuscript_url: Optional[str] = None
    supplementary_url: Optional[str] = None


class SubmissionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    abstract: Optional[str] = None
    authors: Optional[str] = None
    keywords: Optional[str] = None
    category: Optional[str] = None
    cover_letter: Optional[str] = None
    manuscript_url: Optional[str] = None
    supplementary_url: Optional[str] = None


class SubmissionStatusUpdate(BaseModel):
    status: SubmissionStatus
    admin_notes: Optional[str] = None


class SubmissionList(BaseModel):
    submissions: List[Submission]
    total: int


class FileUploadResponse(BaseModel):
    """Path of the stored object inside the private manuscripts bucket."""
    path: str
    file_type: SubmissionFileType


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int


class ConvertToArticleRequest(BaseModel):
    """Overrides applied on top of the submission's own fields."""
    title: Optional[str] = None
    abstract: Optional[str] = None
    content: Optional[str] = None
    authors: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    doi: Optional[str] = None
    is_featured: bool = False
    publish_immediately: bool = False


class ConvertToArticleResponse(BaseModel):
    article: Article
    message: str
