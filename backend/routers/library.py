"""
Reader library: saved articles and reading history of the signed-in user.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from exceptions import AppError
from models import User
from schemas.engagement import (
    ReadingHistoryEntry, ReadingHistoryRecord, SavedArticle, SavedArticlesResponse, SavedState,
)
from services import auth_service
from services.article_service import ArticleService, get_article_service
from services.reading_history_service import ReadingHistoryService, get_reading_history_service
from services.saved_article_service import SavedArticleService, get_saved_article_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/library", tags=["library"])


def _saved_response(saved, message: str) -> SavedArticlesResponse:
    return SavedArticlesResponse(
        saved=[SavedArticle.model_validate(s) for s in saved],
        message=message,
    )


# ==================== Saved articles ====================


@router.get("/saved", response_model=List[SavedArticle], summary="List my saved articles")
async def list_saved(
    current_user: User = Depends(auth_service.validate_token),
    service: SavedArticleService = Depends(get_saved_article_service),
):
    return await service.list_saved(current_user.user_id)


@router.get("/saved/{article_id}", response_model=SavedState, summary="Is this article saved")
async def is_saved(
    article_id: int,
    current_user: User = Depends(auth_service.validate_token),
    service: SavedArticleService = Depends(get_saved_article_service),
):
    return SavedState(article_id=article_id, is_saved=await service.is_saved(current_user.user_id, article_id))


@router.post(
    "/saved/{article_id}",
    response_model=SavedArticlesResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save an article",
)
async def save_article(
    article_id: int,
    current_user: User = Depends(auth_service.validate_token),
    articles: ArticleService = Depends(get_article_service),
    service: SavedArticleService = Depends(get_saved_article_service),
):
    """Only articles the reader can open may be saved; a second save answers 409."""
    article = await articles.get_article(article_id, current_user)
    saved = await service.save(current_user.user_id, article)
    return _saved_response(saved, "Article added to your saved list.")


@router.delete("/saved/{article_id}", response_model=SavedArticlesResponse, summary="Remove a saved article")
async def unsave_article(
    article_id: int,
    current_user: User = Depends(auth_service.validate_token),
    service: SavedArticleService = Depends(get_saved_article_service),
):
    saved = await service.unsave(current_user.user_id, article_id)
    return _saved_response(saved, "Article removed from your saved list.")


# ==================== Reading history ====================


@router.get("/history", response_model=List[ReadingHistoryEntry], summary="My reading history")
async def list_history(
    current_user: User = Depends(auth_service.validate_token),
    service: ReadingHistoryService = Depends(get_reading_history_service),
):
    return await service.list_history(current_user.user_id)


@router.post("/history", response_model=ReadingHistoryEntry, summary="Record a read")
async def record_read(
    body: ReadingHistoryRecord,
    current_user: User = Depends(auth_service.validate_token),
    articles: ArticleService = Depends(get_article_service),
    service: ReadingHistoryService = Depends(get_reading_history_service),
):
    article = await articles.get_article(body.article_id, current_user)
    try:
        return await service.record_read(current_user.user_id, article, body.read_duration_seconds)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"record_read failed for article {body.article_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record reading history",
        )
