"""
Public article endpoints: listing, featured, archive, detail, comments and likes.

Admin article management lives in routers/admin.py.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from exceptions import AppError
from models import User
from schemas.article import Article as ArticleSchema, ArchiveVolume, FeaturedArticles
from schemas.engagement import CommentCreate, CommentList, LikeState
from services import auth_service
from services.article_service import SORT_ORDERS, ArticleService, get_article_service
from services.comment_service import CommentService, get_comment_service
from services.like_service import LikeService, get_like_service
from services.reading_history_service import ReadingHistoryService, get_reading_history_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/articles", tags=["articles"])


async def require_commenter(
    user: Optional[User] = Depends(auth_service.get_optional_user),
) -> User:
    """Anonymous readers are sent to sign in before any comment is written."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to comment",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# ==================== Articles ====================


@router.get("", response_model=List[ArticleSchema], summary="List published articles")
async def list_articles(
    category: Optional[str] = None,
    volume: Optional[str] = None,
    issue: Optional[str] = None,
    featured: Optional[bool] = None,
    q: Optional[str] = Query(None, description="Search title, abstract and authors"),
    sort: str = Query("newest", pattern="^(" + "|".join(SORT_ORDERS) + ")$"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: ArticleService = Depends(get_article_service),
):
    """Published articles only (published_at set and not in the future)."""
    return await service.list_published(
        category=category,
        volume=volume,
        issue=issue,
        featured=featured,
        search=q,
        sort=sort,
        limit=limit,
    )


@router.get("/categories", response_model=List[str], summary="Categories in use")
async def list_categories(service: ArticleService = Depends(get_article_service)):
    return await service.list_categories()


@router.get("/featured", response_model=FeaturedArticles, summary="Featured articles")
async def get_featured(service: ArticleService = Depends(get_article_service)):
    main, featured = await service.get_featured()
    return FeaturedArticles(
        main=ArticleSchema.model_validate(main) if main else None,
        featured=[ArticleSchema.model_validate(a) for a in featured],
    )


@router.get("/archive", response_model=List[ArchiveVolume], summary="Volume/issue index")
async def get_archive(service: ArticleService = Depends(get_article_service)):
    return await service.get_archive()


@router.get("/{article_id}", response_model=ArticleSchema, summary="Get an article")
async def get_article(
    article_id: int,
    viewer: Optional[User] = Depends(auth_service.get_optional_user),
    service: ArticleService = Depends(get_article_service),
    history: ReadingHistoryService = Depends(get_reading_history_service),
):
    """Reading the article records it in a signed-in reader's history."""
    article = await service.get_article(article_id, viewer)
    response = ArticleSchema.model_validate(article)

    if viewer is not None:
        try:
            await history.record_read(viewer.user_id, article)
        except Exception as e:
            logger.error(f"Recording read of article {article_id} failed: {e}", exc_info=True)

    return response


# ==================== Comments ====================


@router.get("/{article_id}/comments", response_model=CommentList, summary="List comments")
async def list_comments(
    article_id: int,
    viewer: Optional[User] = Depends(auth_service.get_optional_user),
    articles: ArticleService = Depends(get_article_service),
    service: CommentService = Depends(get_comment_service),
):
    article = await articles.get_article(article_id, viewer)
    comments = await service.list_comments(article.id)
    return CommentList(comments=comments, total=len(comments))


@router.post(
    "/{article_id}/comments",
    response_model=CommentList,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
)
async def add_comment(
    article_id: int,
    body: CommentCreate,
    current_user: User = Depends(require_commenter),
    articles: ArticleService = Depends(get_article_service),
    service: CommentService = Depends(get_comment_service),
):
    article = await articles.get_article(article_id, current_user)
    try:
        comments = await service.add_comment(article, current_user, body.content)
        return CommentList(comments=comments, total=len(comments))
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"add_comment failed for article {article_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to post comment",
        )


@router.delete("/comments/{comment_id}", response_model=CommentList, summary="Delete a comment")
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(auth_service.validate_token),
    service: CommentService = Depends(get_comment_service),
):
    """Authors may delete their own comments; admins may delete any."""
    article_id = await service.delete_comment(comment_id, current_user)
    comments = await service.list_comments(article_id)
    return CommentList(comments=comments, total=len(comments))


# ==================== Likes ====================


@router.get("/{article_id}/likes", response_model=LikeState, summary="Like count")
async def get_likes(
    article_id: int,
    viewer: Optional[User] = Depends(auth_service.get_optional_user),
    articles: ArticleService = Depends(get_article_service),
    service: LikeService = Depends(get_like_service),
):
    article = await articles.get_article(article_id, viewer)
    return await service.get_state(article.id, viewer.user_id if viewer else None)


@router.post("/{article_id}/likes/toggle", response_model=LikeState, summary="Like or unlike")
async def toggle_like(
    article_id: int,
    current_user: User = Depends(auth_service.validate_token),
    articles: ArticleService = Depends(get_article_service),
    service: LikeService = Depends(get_like_service),
):
    article = await articles.get_article(article_id, current_user)
    try:
        return await service.toggle_like(article, current_user.user_id)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"toggle_like failed for article {article_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update like",
        )
