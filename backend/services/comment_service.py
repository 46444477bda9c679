"""
Comment Service - reader comments on articles.
"""

import logging
from typing import List

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import AuthorizationError, NotFoundError
from models import AppRole, Article, ArticleComment, Profile, User
from schemas.engagement import Comment

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_comments(self, article_id: int) -> List[Comment]:
        """Newest first, each with the author's display name."""
        result = await self.db.execute(
            select(ArticleComment, Profile.full_name)
            .outerjoin(Profile, Profile.user_id == ArticleComment.user_id)
            .where(ArticleComment.article_id == article_id)
            .order_by(ArticleComment.created_at.desc(), ArticleComment.id.desc())
        )
        return [
            Comment(
                id=c.id,
                article_id=c.article_id,
                user_id=c.user_id,
                content=c.content,
                user_name=full_name or "Anonymous",
                created_at=c.created_at,
            )
            for c, full_name in result.all()
        ]

    async def add_comment(self, article: Article, user: User, content: str) -> List[Comment]:
        """
        The article comes from ArticleService.get_article, so it is one the
        commenter may read. Content arrives trimmed and non-empty.
        """
        self.db.add(ArticleComment(article_id=article.id, user_id=user.user_id, content=content))
        await self.db.commit()
        logger.info(f"User {user.user_id} commented on article {article.id}")
        return await self.list_comments(article.id)

    async def delete_comment(self, comment_id: int, user: User) -> int:
        """Authors delete their own comments; admins delete any. Returns the article id."""
        comment = await self.db.get(ArticleComment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.user_id != user.user_id and not user.has_role(AppRole.ADMIN):
            raise AuthorizationError("You can only delete your own comments")

        article_id = comment.article_id
        await self.db.delete(comment)
        await self.db.commit()
        logger.info(f"Comment {comment_id} deleted by user {user.user_id}")
        return article_id


async def get_comment_service(
    db: AsyncSession = Depends(get_async_db)
) -> CommentService:
    return CommentService(db)
