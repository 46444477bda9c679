"""
Admin console statistics.
"""

from pydantic import BaseModel
from typing import Dict, List, Optional

from schemas.article import Article
from models import SubmissionStatus


class DashboardStats(BaseModel):
    total_articles: int
    published: int
    drafts: int
    featured: int
    this_month: int
    last_month: int
    growth_rate: int  # percent, rounded
    recent_articles: List[Article]


class CategoryCount(BaseModel):
    name: str
    value: int


class VolumeCount(BaseModel):
    volume: str
    published: int
    drafts: int
    total: int
    publish_rate: int


class ArticleAnalytics(BaseModel):
    total_articles: int
    published: int
    publish_rate: int
    unique_volumes: int
    unique_categories: int
    categories: List[CategoryCount]
    volumes: List[VolumeCount]


class MonthlyTrend(BaseModel):
    month: str  # e.g. "Mar 2026"
    submissions: int
    reviews: int


class SubmissionProgress(BaseModel):
    submission_id: int
    title: str
    status: SubmissionStatus
    total_reviews: int
    completed_reviews: int
    review_progress: int  # percent of assigned reviews completed
    avg_review_days: Optional[int] = None


class ReviewProgress(BaseModel):
    total_submissions: int
    submissions_by_status: Dict[str, int]
    total_reviews: int
    reviews_by_status: Dict[str, int]
    avg_review_days: float
    review_completion_rate: int
    recent_submissions: int  # created in the last 7 days
    monthly_trends: List[MonthlyTrend]
    submissions_in_progress: List[SubmissionProgress]
