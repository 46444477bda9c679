"""
Admin console API endpoints.
Requires the admin role for all operations.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from pydantic import BaseModel

from exceptions import AppError
from models import AccountStatus, AppRole, User
from schemas.analytics import ArticleAnalytics, DashboardStats, ReviewProgress
from schemas.article import Article as ArticleSchema, ArticleCreate, ArticleUpdate, ImageUploadResponse
from schemas.profile import Profile
from schemas.submission import (
    ConvertToArticleRequest, ConvertToArticleResponse, Submission, SubmissionStatusUpdate,
)
from schemas.user import UserList
from services import auth_service
from services.analytics_service import AnalyticsService, get_analytics_service
from services.article_service import ArticleService, get_article_service
from services.profile_service import ProfileService, get_profile_service
from services.storage_service import StorageService, get_storage_service
from services.submission_service import SubmissionService, get_submission_service
from services.user_service import UserService, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


class RoleAssignment(BaseModel):
    role: AppRole


class AccountStatusUpdate(BaseModel):
    account_status: AccountStatus


async def _user_list(user_service: UserService) -> UserList:
    users = await user_service.list_users()
    return UserList(users=users, total=len(users))


# ==================== Users & roles ====================


@router.get("/users", response_model=UserList, summary="List all users")
async def list_users(
    current_user: User = Depends(auth_service.require_admin),
    user_service: UserService = Depends(get_user_service),
):
    """Users with their profile name, account status and roles, newest first."""
    return await _user_list(user_service)


@router.post("/users/{user_id}/roles", response_model=UserList, summary="Grant a role")
async def assign_role(
    user_id: int,
    body: RoleAssignment,
    current_user: User = Depends(auth_service.require_admin),
    user_service: UserService = Depends(get_user_service),
):
    """Granting a role the user already holds answers 409 "User already has this role"."""
    logger.info(f"assign_role - admin={current_user.user_id}, user_id={user_id}, role={body.role.value}")
    try:
        await user_service.assign_role(user_id, body.role)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"assign_role failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign role",
        )
    return await _user_list(user_service)


@router.delete("/users/{user_id}/roles/{role}", response_model=UserList, summary="Revoke a role")
async def remove_role(
    user_id: int,
    role: AppRole,
    current_user: User = Depends(auth_service.require_admin),
    user_service: UserService = Depends(get_user_service),
):
    logger.info(f"remove_role - admin={current_user.user_id}, user_id={user_id}, role={role.value}")
    await user_service.remove_role(user_id, role)
    return await _user_list(user_service)


@router.put("/users/{user_id}/account-status", response_model=Profile, summary="Set account status")
async def set_account_status(
    user_id: int,
    body: AccountStatusUpdate,
    current_user: User = Depends(auth_service.require_admin),
    user_service: UserService = Depends(get_user_service),
    profile_service: ProfileService = Depends(get_profile_service),
):
    if await user_service.get_user_by_id(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return await profile_service.set_account_status(user_id, body.account_status)


# ==================== Analytics ====================


@router.get("/analytics/dashboard", response_model=DashboardStats, summary="Dashboard figures")
async def get_dashboard(
    current_user: User = Depends(auth_service.require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.dashboard()


@router.get("/analytics/articles", response_model=ArticleAnalytics, summary="Article breakdown")
async def get_article_analytics(
    current_user: User = Depends(auth_service.require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.analytics()


@router.get("/analytics/review-progress", response_model=ReviewProgress, summary="Review pipeline")
async def get_review_progress(
    current_user: User = Depends(auth_service.require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.review_progress()


# ==================== Articles ====================


@router.get("/articles", response_model=List[ArticleSchema], summary="All articles, drafts included")
async def list_all_articles(
    current_user: User = Depends(auth_service.require_admin),
    service: ArticleService = Depends(get_article_service),
):
    return await service.list_all()


@router.post("/articles", response_model=ArticleSchema, status_code=status.HTTP_201_CREATED, summary="Create an article")
async def create_article(
    body: ArticleCreate,
    current_user: User = Depends(auth_service.require_admin),
    service: ArticleService = Depends(get_article_service),
):
    try:
        return await service.create(body, created_by=current_user.user_id)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"create_article failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create article",
        )


@router.put("/articles/{article_id}", response_model=ArticleSchema, summary="Update an article")
async def update_article(
    article_id: int,
    body: ArticleUpdate,
    current_user: User = Depends(auth_service.require_admin),
    service: ArticleService = Depends(get_article_service),
):
    return await service.update(article_id, body)


@router.delete("/articles/{article_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an article")
async def delete_article(
    article_id: int,
    current_user: User = Depends(auth_service.require_admin),
    service: ArticleService = Depends(get_article_service),
):
    await service.delete(article_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/articles/{article_id}/publish", response_model=List[ArticleSchema], summary="Publish now")
async def publish_article(
    article_id: int,
    current_user: User = Depends(auth_service.require_admin),
    service: ArticleService = Depends(get_article_service),
):
    """Sets published_at to now and returns the refreshed admin list."""
    return await service.set_published(article_id, True)


@router.post("/articles/{article_id}/unpublish", response_model=List[ArticleSchema], summary="Unpublish")
async def unpublish_article(
    article_id: int,
    current_user: User = Depends(auth_service.require_admin),
    service: ArticleService = Depends(get_article_service),
):
    """Clears published_at and returns the refreshed admin list."""
    return await service.set_published(article_id, False)


@router.post("/articles/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED, summary="Upload an article image")
async def upload_article_image(
    file: UploadFile = File(...),
    current_user: User = Depends(auth_service.require_admin),
    storage: StorageService = Depends(get_storage_service),
):
    """Images only, at most 5MB. Stored under a random name in the public bucket."""
    data = await file.read()
    path, url = storage.upload_article_image(data, file.filename, file.content_type)
    return ImageUploadResponse(url=url, path=path)


# ==================== Submissions ====================


@router.put("/submissions/{submission_id}/status", response_model=Submission, summary="Set submission status")
async def update_submission_status(
    submission_id: int,
    body: SubmissionStatusUpdate,
    current_user: User = Depends(auth_service.require_admin),
    service: SubmissionService = Depends(get_submission_service),
):
    return await service.update_status(submission_id, body.status, body.admin_notes)


@router.post(
    "/submissions/{submission_id}/convert",
    response_model=ConvertToArticleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Convert a submission into an article",
)
async def convert_submission(
    submission_id: int,
    body: ConvertToArticleRequest,
    current_user: User = Depends(auth_service.require_admin),
    service: SubmissionService = Depends(get_submission_service),
):
    article = await service.convert_to_article(submission_id, body, created_by=current_user.user_id)
    message = (
        "The submission has been converted and published."
        if body.publish_immediately
        else "The submission has been converted to a draft article."
    )
    return ConvertToArticleResponse(article=ArticleSchema.model_validate(article), message=message)
