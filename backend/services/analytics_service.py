"""
Analytics Service - admin console statistics.

All figures are computed from the current rows on every request; nothing is
cached or precomputed.
"""

import logging
import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from models import Article, ReviewStatus, Submission, SubmissionReview, SubmissionStatus
from schemas.analytics import (
    ArticleAnalytics, CategoryCount, DashboardStats, MonthlyTrend, ReviewProgress,
    SubmissionProgress, VolumeCount,
)
from schemas.article import Article as ArticleSchema
from utils.date_utils import month_label, shift_months, whole_days_between

logger = logging.getLogger(__name__)

RECENT_ARTICLES = 5
RECENT_SUBMISSION_DAYS = 7
TREND_MONTHS = 6
PROGRESS_LIMIT = 10
IN_PROGRESS_STATUSES = (SubmissionStatus.PENDING, SubmissionStatus.UNDER_REVIEW)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent(part: int, whole: int) -> int:
    """Rounded percentage, 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def growth_rate(current: int, previous: int) -> int:
    """Month-over-month growth; 100 when growing from nothing."""
    if previous > 0:
        return round_half_up((current - previous) / previous * 100)
    return 100 if current > 0 else 0


class AnalyticsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _articles(self) -> List[Article]:
        result = await self.db.execute(
            select(Article).order_by(Article.created_at.desc(), Article.id.desc())
        )
        return list(result.scalars().all())

    async def dashboard(self, now: Optional[datetime] = None) -> DashboardStats:
        now = now or datetime.utcnow()
        articles = await self._articles()

        month_ago = shift_months(now, -1)
        two_months_ago = shift_months(now, -2)
        this_month = sum(1 for a in articles if a.created_at and a.created_at >= month_ago)
        last_month = sum(
            1 for a in articles
            if a.created_at and two_months_ago <= a.created_at < month_ago
        )
        published = sum(1 for a in articles if a.published_at)

        return DashboardStats(
            total_articles=len(articles),
            published=published,
            drafts=len(articles) - published,
            featured=sum(1 for a in articles if a.is_featured or a.is_main_featured),
            this_month=this_month,
            last_month=last_month,
            growth_rate=growth_rate(this_month, last_month),
            recent_articles=[ArticleSchema.model_validate(a) for a in articles[:RECENT_ARTICLES]],
        )

    async def analytics(self) -> ArticleAnalytics:
        """Per-category and per-volume breakdown across drafts and published articles."""
        articles = await self._articles()

        categories: Dict[str, int] = {}
        volumes: Dict[str, Dict[str, int]] = {}
        for article in articles:
            category = article.category or "Uncategorized"
            categories[category] = categories.get(category, 0) + 1

            counts = volumes.setdefault(article.volume or "No Volume", {"published": 0, "drafts": 0})
            counts["published" if article.published_at else "drafts"] += 1

        volume_rows = [
            VolumeCount(
                volume=volume,
                published=counts["published"],
                drafts=counts["drafts"],
                total=counts["published"] + counts["drafts"],
                publish_rate=percent(counts["published"], counts["published"] + counts["drafts"]),
            )
            for volume, counts in volumes.items()
        ]
        # Stable sort keeps first-seen order among equal totals
        volume_rows.sort(key=lambda v: v.total, reverse=True)

        published = sum(1 for a in articles if a.published_at)
        return ArticleAnalytics(
            total_articles=len(articles),
            published=published,
            publish_rate=percent(published, len(articles)),
            unique_volumes=len({a.volume for a in articles if a.volume}),
            unique_categories=len({a.category for a in articles if a.category}),
            categories=[CategoryCount(name=name, value=value) for name, value in categories.items()],
            volumes=volume_rows,
        )

    async def review_progress(self, now: Optional[datetime] = None) -> ReviewProgress:
        """Submission pipeline and reviewer turnaround figures."""
        now = now or datetime.utcnow()

        result = await self.db.execute(
            select(Submission).order_by(Submission.created_at.desc(), Submission.id.desc())
        )
        submissions = list(result.scalars().all())
        result = await self.db.execute(select(SubmissionReview))
        reviews = list(result.scalars().all())

        submissions_by_status = Counter(s.status.value for s in submissions)
        reviews_by_status = Counter(r.status.value for r in reviews)

        timed = [r for r in reviews if r.completed_at and r.assigned_at]
        avg_review_days = 0.0
        if timed:
            total_days = sum(whole_days_between(r.assigned_at, r.completed_at) for r in timed)
            avg_review_days = round_half_up(total_days / len(timed) * 10) / 10

        recent_cutoff = now - timedelta(days=RECENT_SUBMISSION_DAYS)
        recent = sum(1 for s in submissions if s.created_at and s.created_at >= recent_cutoff)

        return ReviewProgress(
            total_submissions=len(submissions),
            submissions_by_status=dict(submissions_by_status),
            total_reviews=len(reviews),
            reviews_by_status=dict(reviews_by_status),
            avg_review_days=avg_review_days,
            review_completion_rate=percent(reviews_by_status.get(ReviewStatus.COMPLETED.value, 0), len(reviews)),
            recent_submissions=recent,
            monthly_trends=self._monthly_trends(submissions, reviews, now),
            submissions_in_progress=self._submission_progress(submissions, reviews),
        )

    @staticmethod
    def _monthly_trends(submissions, reviews, now: datetime) -> List[MonthlyTrend]:
        """Submissions created and reviews assigned per month, oldest month first."""
        months: Dict[str, MonthlyTrend] = {}
        for offset in range(TREND_MONTHS - 1, -1, -1):
            month_start = shift_months(now.replace(day=1), -offset)
            label = month_label(month_start.year, month_start.month)
            months[label] = MonthlyTrend(month=label, submissions=0, reviews=0)

        for s in submissions:
            if s.created_at:
                trend = months.get(month_label(s.created_at.year, s.created_at.month))
                if trend:
                    trend.submissions += 1
        for r in reviews:
            if r.assigned_at:
                trend = months.get(month_label(r.assigned_at.year, r.assigned_at.month))
                if trend:
                    trend.reviews += 1
        return list(months.values())

    @staticmethod
    def _submission_progress(submissions, reviews) -> List[SubmissionProgress]:
        by_submission: Dict[int, list] = {}
        for r in reviews:
            by_submission.setdefault(r.submission_id, []).append(r)

        rows = []
        for s in [s for s in submissions if s.status in IN_PROGRESS_STATUSES][:PROGRESS_LIMIT]:
            assigned = by_submission.get(s.id, [])
            completed = sum(1 for r in assigned if r.status == ReviewStatus.COMPLETED)
            finished = [r for r in assigned if r.completed_at and r.assigned_at]
            avg_days = None
            if finished:
                avg_days = round_half_up(
                    sum(whole_days_between(r.assigned_at, r.completed_at) for r in finished) / len(finished)
                )
            rows.append(SubmissionProgress(
                submission_id=s.id,
                title=s.title,
                status=s.status,
                total_reviews=len(assigned),
                completed_reviews=completed,
                review_progress=percent(completed, len(assigned)),
                avg_review_days=avg_days,
            ))
        return rows


async def get_analytics_service(
    db: AsyncSession = Depends(get_async_db)
) -> AnalyticsService:
    return AnalyticsService(db)
