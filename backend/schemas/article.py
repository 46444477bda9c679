"""
Article schemas for the Journal Platform

Published articles, their admin create/update payloads and the archive
(volume/issue) index.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from utils.date_utils import to_naive_utc


class Article(BaseModel):
    """Article business object"""
    id: int
    title: str
    abstract: Optional[str] = None
    content: Optional[str] = None
    authors: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_featured: bool = False
    is_main_featured: bool = False
    volume: Optional[str] = None
    issue: Optional[str] = None
    doi: Optional[str] = None
    review_status: Optional[str] = None
    published_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    abstract: Optional[str] = None
    content: Optional[str] = None
    authors: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_featured: bool = False
    is_main_featured: bool = False
    volume: Optional[str] = None
    issue: Optional[str] = None
    doi: Optional[str] = None
    published_at: Optional[datetime] = None

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class ArticleUpdate(BaseModel):
    """Partial update; only fields that are sent are written."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    abstract: Optional[str] = None
    content: Optional[str] = None
    authors: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_featured: Optional[bool] = None
    is_main_featured: Optional[bool] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    doi: Optional[str] = None
    published_at: Optional[datetime] = None

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class FeaturedArticles(BaseModel):
    main: Optional[Article] = None
    featured: List[Article] = []


class ArchiveIssue(BaseModel):
    """One (volume, issue) pair with its published article count."""
    volume: str
    issue: str
    article_count: int
    latest_published_at: Optional[datetime] = None


class ArchiveVolume(BaseModel):
    volume: str
    issues: List[ArchiveIssue]


class ImageUploadResponse(BaseModel):
    url: str
    path: str
