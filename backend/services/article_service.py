"""
Article Service - journal articles, publication and the archive index.

Publication is a timestamp: an article is public once published_at is set
and not in the future. Publishing sets it to now, unpublishing clears it.
"""

import logging
import re
from collections import OrderedDict
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import NotFoundError
from models import (
    AppRole, Article, ArticleComment, ArticleLike, ArticleReview, SavedArticle, ReadingHistory,
    User,
)
from schemas.article import ArchiveIssue, ArchiveVolume, ArticleCreate, ArticleUpdate

logger = logging.getLogger(__name__)

SORT_ORDERS = ("newest", "oldest", "title")


def leading_int(value: Optional[str]) -> int:
    """Numeric prefix of a volume/issue label ('12', '12a' -> 12; 'Spring' -> 0)."""
    match = re.match(r"\s*(-?\d+)", value or "")
    return int(match.group(1)) if match else 0


class ArticleService:

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _published_clause(now: Optional[datetime] = None):
        now = now or datetime.utcnow()
        return (Article.published_at.isnot(None), Article.published_at <= now)

    @staticmethod
    def is_published(article: Article, now: Optional[datetime] = None) -> bool:
        now = now or datetime.utcnow()
        return article.published_at is not None and article.published_at <= now

    # ==================== Public reads ====================

    async def list_published(
        self,
        category: Optional[str] = None,
        volume: Optional[str] = None,
        issue: Optional[str] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        limit: Optional[int] = None,
    ) -> List[Article]:
        stmt = select(Article).where(*self._published_clause())

        if category:
            stmt = stmt.where(func.trim(Article.category) == category.strip())
        if volume:
            stmt = stmt.where(Article.volume == volume)
        if issue:
            stmt = stmt.where(Article.issue == issue)
        if featured is not None:
            stmt = stmt.where(Article.is_featured == featured)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                func.lower(Article.title).like(pattern),
                func.lower(Article.abstract).like(pattern),
                func.lower(Article.authors).like(pattern),
            ))

        if sort == "oldest":
            stmt = stmt.order_by(Article.published_at.asc(), Article.id.asc())
        elif sort == "title":
            stmt = stmt.order_by(Article.title.asc())
        else:
            stmt = stmt.order_by(Article.published_at.desc(), Article.id.desc())

        if limit:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_categories(self) -> List[str]:
        """Distinct trimmed categories of published articles, sorted."""
        result = await self.db.execute(
            select(Article.category).where(*self._published_clause(), Article.category.isnot(None))
        )
        return sorted({c.strip() for c in result.scalars().all() if c and c.strip()})

    async def get_featured(self) -> Tuple[Optional[Article], List[Article]]:
        """The main featured article (newest wins) and the other featured articles."""
        result = await self.db.execute(
            select(Article)
            .where(*self._published_clause(), or_(Article.is_featured == True, Article.is_main_featured == True))
            .order_by(Article.published_at.desc(), Article.id.desc())
        )
        articles = list(result.scalars().all())
        main = next((a for a in articles if a.is_main_featured), None)
        featured = [a for a in articles if a is not main and a.is_featured]
        return main, featured

    async def get_article(self, article_id: int, viewer: Optional[User] = None) -> Article:
        """Unpublished articles are only visible to admins."""
        article = await self.db.get(Article, article_id)
        if article is None:
            raise NotFoundError("Article not found")
        if not self.is_published(article):
            if viewer is None or not viewer.has_role(AppRole.ADMIN):
                raise NotFoundError("Article not found")
        return article

    async def get_archive(self) -> List[ArchiveVolume]:
        """
        Published articles grouped by (volume, issue), newest volume and issue
        first. Articles missing either label are left out.
        """
        result = await self.db.execute(
            select(Article.volume, Article.issue, Article.published_at)
            .where(*self._published_clause())
        )

        grouped: dict = {}
        for volume, issue, published_at in result.all():
            if not volume or not issue:
                continue
            key = (volume, issue)
            entry = grouped.get(key)
            if entry is None:
                entry = grouped[key] = ArchiveIssue(volume=volume, issue=issue, article_count=0)
            entry.article_count += 1
            if entry.latest_published_at is None or published_at > entry.latest_published_at:
                entry.latest_published_at = published_at

        issues = sorted(
            grouped.values(),
            key=lambda i: (leading_int(i.volume), leading_int(i.issue)),
            reverse=True,
        )

        volumes: "OrderedDict[str, List[ArchiveIssue]]" = OrderedDict()
        for entry in issues:
            volumes.setdefault(entry.volume, []).append(entry)
        return [ArchiveVolume(volume=v, issues=items) for v, items in volumes.items()]

    # ==================== Admin ====================

    async def list_all(self) -> List[Article]:
        """Every article, drafts included, newest created first."""
        result = await self.db.execute(
            select(Article).order_by(Article.created_at.desc(), Article.id.desc())
        )
        return list(result.scalars().all())

    async def _get_or_404(self, article_id: int) -> Article:
        article = await self.db.get(Article, article_id)
        if article is None:
            raise NotFoundError("Article not found")
        return article

    async def create(self, data: ArticleCreate, created_by: Optional[int] = None) -> Article:
        article = Article(**data.model_dump(), created_by=created_by)
        self.db.add(article)
        await self.db.commit()
        await self.db.refresh(article)
        logger.info(f"Created article {article.id}: {article.title[:60]}")
        return article

    async def update(self, article_id: int, data: ArticleUpdate) -> Article:
        article = await self._get_or_404(article_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(article, field, value)
        await self.db.commit()
        await self.db.refresh(article)
        logger.info(f"Updated article {article_id}")
        return article

    async def delete(self, article_id: int) -> None:
        article = await self._get_or_404(article_id)
        for child in (ArticleComment, ArticleLike, ArticleReview, SavedArticle, ReadingHistory):
            await self.db.execute(delete(child).where(child.article_id == article_id))
        await self.db.delete(article)
        await self.db.commit()
        logger.info(f"Deleted article {article_id}")

    async def set_published(self, article_id: int, published: bool) -> List[Article]:
        """Publish (now) or unpublish, then return the refreshed admin list."""
        article = await self._get_or_404(article_id)
        article.published_at = datetime.utcnow() if published else None
        await self.db.commit()
        logger.info(f"Article {article_id} {'published' if published else 'unpublished'}")
        return await self.list_all()


async def get_article_service(
    db: AsyncSession = Depends(get_async_db)
) -> ArticleService:
    return ArticleService(db)
