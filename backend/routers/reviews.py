"""
Peer review endpoints.

Reviews exist for two targets, /api/reviews/article/... and
/api/reviews/submission/..., with the same workflow.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from exceptions import AppError
from models import AppRole, User
from schemas.review import (
    AssignReviewerRequest, ReviewAssignment, ReviewerCheck, ReviewList, ReviewStatusUpdate,
    ReviewSubmit, ReviewTarget,
)
from services import auth_service
from services.review_service import ReviewService, get_review_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.get("/mine", response_model=List[ReviewAssignment], summary="My review assignments")
async def list_my_reviews(
    current_user: User = Depends(auth_service.require_reviewer),
    service: ReviewService = Depends(get_review_service),
):
    """Both targets, newest first. Authors are never shown to reviewers."""
    return await service.list_mine(current_user.user_id)


@router.get("/is-reviewer", response_model=ReviewerCheck, summary="Does the caller hold the reviewer role")
async def is_reviewer(current_user: User = Depends(auth_service.validate_token)):
    return ReviewerCheck(is_reviewer=current_user.has_role(AppRole.REVIEWER))


@router.post(
    "/assign",
    response_model=ReviewList,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a reviewer",
)
async def assign_reviewer(
    body: AssignReviewerRequest,
    current_user: User = Depends(auth_service.require_admin),
    service: ReviewService = Depends(get_review_service),
):
    """
    Assigning the same reviewer twice to the same target answers 409
    "Reviewer is already assigned to this ...".
    """
    logger.info(
        f"assign_reviewer - admin={current_user.user_id}, target={body.target.value}, "
        f"target_id={body.target_id}, reviewer_id={body.reviewer_id}"
    )
    reviews = await service.assign(body.target, body.target_id, body.reviewer_id)
    return ReviewList(reviews=reviews, total=len(reviews))


@router.get("/{target}", response_model=ReviewList, summary="List all reviews of a target kind")
async def list_reviews(
    target: ReviewTarget,
    current_user: User = Depends(auth_service.require_admin),
    service: ReviewService = Depends(get_review_service),
):
    reviews = await service.list_all(target)
    return ReviewList(reviews=reviews, total=len(reviews))


@router.post("/{target}/{review_id}/submit", response_model=ReviewAssignment, summary="Submit a completed review")
async def submit_review(
    target: ReviewTarget,
    review_id: int,
    body: ReviewSubmit,
    current_user: User = Depends(auth_service.validate_token),
    service: ReviewService = Depends(get_review_service),
):
    """Only the assigned reviewer may submit. The recommendation must be one of the four values."""
    try:
        review = await service.submit(target, review_id, current_user, body)
        return await service.get_assignment(target, review)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"submit_review failed for {target.value}/{review_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit review",
        )


@router.put("/{target}/{review_id}/status", response_model=ReviewAssignment, summary="Change review status")
async def update_review_status(
    target: ReviewTarget,
    review_id: int,
    body: ReviewStatusUpdate,
    current_user: User = Depends(auth_service.validate_token),
    service: ReviewService = Depends(get_review_service),
):
    review = await service.update_status(target, review_id, current_user, body.status)
    return await service.get_assignment(target, review)


@router.delete("/{target}/{review_id}", response_model=ReviewList, summary="Remove a review assignment")
async def remove_review(
    target: ReviewTarget,
    review_id: int,
    current_user: User = Depends(auth_service.require_admin),
    service: ReviewService = Depends(get_review_service),
):
    reviews = await service.remove(target, review_id)
    return ReviewList(reviews=reviews, total=len(reviews))
