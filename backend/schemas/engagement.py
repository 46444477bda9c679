"""
Reader engagement schemas: comments, likes, saved articles and reading history.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


# ============================================================================
# COMMENTS
# ============================================================================


class Comment(BaseModel):
    id: int
    article_id: int
    user_id: int
    content: str
    user_name: str = "Anonymous"
    created_at: datetime


class CommentCreate(BaseModel):
    content: str = Field(max_length=5000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class CommentList(BaseModel):
    comments: List[Comment]
    total: int


# ============================================================================
# LIKES
# ============================================================================


class LikeState(BaseModel):
    article_id: int
    count: int
    is_liked: bool


# ============================================================================
# SAVED ARTICLES & READING HISTORY
# ============================================================================


class SavedArticle(BaseModel):
    id: int
    article_id: int
    article_title: str
    article_authors: Optional[str] = None
    article_image: Optional[str] = None
    saved_at: datetime

    class Config:
        from_attributes = True


class SavedState(BaseModel):
    article_id: int
    is_saved: bool


class SavedArticlesResponse(BaseModel):
    """The refreshed saved list after a save or unsave."""
    saved: List[SavedArticle]
    message: str


class ReadingHistoryEntry(BaseModel):
    id: int
    article_id: int
    article_title: str
    article_authors: Optional[str] = None
    article_image: Optional[str] = None
    read_at: datetime
    read_duration_seconds: Optional[int] = None

    class Config:
        from_attributes = True


class ReadingHistoryRecord(BaseModel):
    """Explicit read record; the article detail endpoint records reads on its own."""
    article_id: int
    read_duration_seconds: Optional[int] = Field(None, ge=0)
