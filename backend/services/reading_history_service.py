"""
Reading History Service - one row per (user, article), refreshed on every read.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from models import Article, ReadingHistory
from utils.db_errors import is_unique_violation

logger = logging.getLogger(__name__)


class ReadingHistoryService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_history(self, user_id: int) -> List[ReadingHistory]:
        """Most recently read first."""
        result = await self.db.execute(
            select(ReadingHistory)
            .where(ReadingHistory.user_id == user_id)
            .order_by(ReadingHistory.read_at.desc(), ReadingHistory.id.desc())
        )
        return list(result.scalars().all())

    async def _find(self, user_id: int, article_id: int) -> Optional[ReadingHistory]:
        result = await self.db.execute(
            select(ReadingHistory).where(
                ReadingHistory.user_id == user_id,
                ReadingHistory.article_id == article_id,
            )
        )
        return result.scalars().first()

    async def record_read(
        self,
        user_id: int,
        article: Article,
        read_duration_seconds: Optional[int] = None,
    ) -> ReadingHistory:
        """Upsert on (user, article): refresh read_at and the denormalized article fields."""
        now = datetime.utcnow()
        article_id = article.id
        entry = await self._find(user_id, article_id)
        if entry is None:
            entry = ReadingHistory(user_id=user_id, article_id=article_id)
            self.db.add(entry)

        entry.article_title = article.title
        entry.article_authors = article.authors or None
        entry.article_image = article.image_url or None
        entry.read_at = now
        if read_duration_seconds is not None:
            entry.read_duration_seconds = read_duration_seconds

        try:
            await self.db.commit()
        except IntegrityError as e:
            # A concurrent read inserted the row first; update that one instead
            await self.db.rollback()
            if not is_unique_violation(e):
                raise
            entry = await self._find(user_id, article_id)
            entry.read_at = now
            if read_duration_seconds is not None:
                entry.read_duration_seconds = read_duration_seconds
            await self.db.commit()

        logger.debug(f"Recorded read of article {article_id} by user {user_id}")
        return entry


async def get_reading_history_service(
    db: AsyncSession = Depends(get_async_db)
) -> ReadingHistoryService:
    return ReadingHistoryService(db)
