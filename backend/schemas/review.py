"""
Peer review schemas

One workflow serves two targets: published articles (article_reviews) and
author submissions (submission_reviews). The target kind travels with every
review so a single reviewer dashboard can list both.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from models import ReviewStatus, Recommendation


class ReviewTarget(str, Enum):
    ARTICLE = "article"
    SUBMISSION = "submission"


class Review(BaseModel):
    """Review as seen by admins: includes reviewer identity and private notes."""
    id: int
    target: ReviewTarget
    target_id: int
    target_title: str
    target_abstract: Optional[str] = None
    reviewer_id: int
    reviewer_name: str = "Unknown Reviewer"
    status: ReviewStatus
    recommendation: Optional[Recommendation] = None
    feedback: Optional[str] = None
    private_notes: Optional[str] = None
    assigned_at: datetime
    completed_at: Optional[datetime] = None


class ReviewAssignment(BaseModel):
    """
    Review as seen by the assigned reviewer.

    Single-blind: the manuscript's title, abstract and topic are shown but
    never its authors.
    """
    id: int
    target: ReviewTarget
    target_id: int
    target_title: str
    target_abstract: Optional[str] = None
    target_content: Optional[str] = None
    target_category: Optional[str] = None
    target_keywords: Optional[str] = None
    status: ReviewStatus
    recommendation: Optional[Recommendation] = None
    feedback: Optional[str] = None
    private_notes: Optional[str] = None
    assigned_at: datetime
    completed_at: Optional[datetime] = None


class AssignReviewerRequest(BaseModel):
    target: ReviewTarget = ReviewTarget.ARTICLE
    target_id: int
    reviewer_id: int


class ReviewSubmit(BaseModel):
    """Completing a review requires one of the four recommendations."""
    recommendation: Recommendation
    feedback: str = Field(default="", max_length=20000)
    private_notes: Optional[str] = Field(None, max_length=20000)


class ReviewStatusUpdate(BaseModel):
    status: ReviewStatus


class ReviewList(BaseModel):
    reviews: List[Review]
    total: int


class ReviewerCheck(BaseModel):
    is_reviewer: bool
