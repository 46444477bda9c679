"""
Like Service - per-user article likes.

Toggling reads the caller's current like, then deletes it or inserts one.
Toggling twice leaves the count where it started.
"""

import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from models import Article, ArticleLike
from schemas.engagement import LikeState

logger = logging.getLogger(__name__)


class LikeService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, article_id: int) -> int:
        result = await self.db.execute(
            select(func.count(ArticleLike.id)).where(ArticleLike.article_id == article_id)
        )
        return result.scalar() or 0

    async def _find(self, article_id: int, user_id: int):
        result = await self.db.execute(
            select(ArticleLike).where(
                and_(
                    ArticleLike.article_id == article_id,
                    ArticleLike.user_id == user_id
                )
            )
        )
        return result.scalars().first()

    async def get_state(self, article_id: int, user_id: Optional[int] = None) -> LikeState:
        is_liked = False
        if user_id is not None:
            is_liked = await self._find(article_id, user_id) is not None
        return LikeState(article_id=article_id, count=await self._count(article_id), is_liked=is_liked)

    async def toggle_like(self, article: Article, user_id: int) -> LikeState:
        """
        Like or unlike an article for a user.

        Args:
            article: Resolved through ArticleService.get_article, so drafts
                never reach here for non-admins

        Returns:
            The new count and whether the user now likes the article
        """
        article_id = article.id

        existing = await self._find(article_id, user_id)
        if existing:
            await self.db.delete(existing)
            await self.db.commit()
            logger.info(f"User {user_id} unliked article {article_id}")
        else:
            self.db.add(ArticleLike(article_id=article_id, user_id=user_id))
            await self.db.commit()
            logger.info(f"User {user_id} liked article {article_id}")

        return await self.get_state(article_id, user_id)


async def get_like_service(
    db: AsyncSession = Depends(get_async_db)
) -> LikeService:
    return LikeService(db)
