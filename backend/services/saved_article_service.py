"""
Saved Article Service - per-user bookmarks.

The article's title, authors and image are copied onto the bookmark when
it is saved, so the saved list renders without joining articles.
"""

import logging
from typing import List

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import AppError, ConflictError
from models import Article, SavedArticle
from utils.db_errors import is_unique_violation

logger = logging.getLogger(__name__)


class SavedArticleService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_saved(self, user_id: int) -> List[SavedArticle]:
        result = await self.db.execute(
            select(SavedArticle)
            .where(SavedArticle.user_id == user_id)
            .order_by(SavedArticle.saved_at.desc(), SavedArticle.id.desc())
        )
        return list(result.scalars().all())

    async def is_saved(self, user_id: int, article_id: int) -> bool:
        result = await self.db.execute(
            select(SavedArticle.id).where(
                SavedArticle.user_id == user_id,
                SavedArticle.article_id == article_id,
            )
        )
        return result.first() is not None

    async def save(self, user_id: int, article: Article) -> List[SavedArticle]:
        """
        Insert the bookmark for an article the user may read (resolved by
        ArticleService.get_article). The unique (user, article) constraint
        rejects repeats.
        """
        article_id = article.id

        self.db.add(SavedArticle(
            user_id=user_id,
            article_id=article.id,
            article_title=article.title,
            article_authors=article.authors or None,
            article_image=article.image_url or None,
        ))
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                raise ConflictError("This article is already in your saved list.")
            logger.error(f"Saving article {article_id} for user {user_id} failed: {e}", exc_info=True)
            raise AppError("Failed to save article.")

        logger.info(f"User {user_id} saved article {article_id}")
        return await self.list_saved(user_id)

    async def unsave(self, user_id: int, article_id: int) -> List[SavedArticle]:
        await self.db.execute(
            delete(SavedArticle).where(
                SavedArticle.user_id == user_id,
                SavedArticle.article_id == article_id,
            )
        )
        await self.db.commit()
        logger.info(f"User {user_id} unsaved article {article_id}")
        return await self.list_saved(user_id)


async def get_saved_article_service(
    db: AsyncSession = Depends(get_async_db)
) -> SavedArticleService:
    return SavedArticleService(db)
