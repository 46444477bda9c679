"""
Review Service - peer review assignments for articles and submissions.

Both review targets share one workflow:

    assign (admin) -> pending -> in_progress -> completed
                                            \\-> declined

Transitions are not validated: any status may be set at any time. Completing
a review records a recommendation (accept, minor_revisions, major_revisions,
reject), feedback for the authors and private notes for the editors.

Duplicate assignment of the same reviewer to the same target is rejected by
the store's unique constraint and reported as a conflict.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Type

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import AppError, AuthorizationError, ConflictError, NotFoundError
from models import (
    AppRole, Article, ArticleReview, Profile, ReviewStatus, Submission, SubmissionReview,
    SubmissionStatus, User,
)
from schemas.review import Review, ReviewAssignment, ReviewSubmit, ReviewTarget
from utils.db_errors import is_unique_violation

logger = logging.getLogger(__name__)

UNDER_REVIEW = "under_review"


@dataclass(frozen=True)
class _TargetTables:
    review_model: Type
    target_model: Type
    fk_column: str
    unknown_title: str


TARGETS: Dict[ReviewTarget, _TargetTables] = {
    ReviewTarget.ARTICLE: _TargetTables(ArticleReview, Article, "article_id", "Unknown Article"),
    ReviewTarget.SUBMISSION: _TargetTables(SubmissionReview, Submission, "submission_id", "Unknown Submission"),
}


class ReviewService:

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Helpers ====================

    async def _reviewer_names(self, reviewer_ids) -> Dict[int, str]:
        ids = set(reviewer_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(Profile.user_id, Profile.full_name).where(Profile.user_id.in_(ids))
        )
        return {user_id: name for user_id, name in result.all() if name}

    async def _targets_by_id(self, target: ReviewTarget, target_ids) -> Dict[int, object]:
        ids = set(target_ids)
        if not ids:
            return {}
        model = TARGETS[target].target_model
        result = await self.db.execute(select(model).where(model.id.in_(ids)))
        return {t.id: t for t in result.scalars().all()}

    async def _to_admin_views(self, target: ReviewTarget, reviews: list) -> List[Review]:
        tables = TARGETS[target]
        targets = await self._targets_by_id(target, [getattr(r, tables.fk_column) for r in reviews])
        names = await self._reviewer_names(r.reviewer_id for r in reviews)

        views = []
        for r in reviews:
            target_id = getattr(r, tables.fk_column)
            t = targets.get(target_id)
            views.append(Review(
                id=r.id,
                target=target,
                target_id=target_id,
                target_title=t.title if t else tables.unknown_title,
                target_abstract=t.abstract if t else None,
                reviewer_id=r.reviewer_id,
                reviewer_name=names.get(r.reviewer_id, "Unknown Reviewer"),
                status=r.status,
                recommendation=r.recommendation,
                feedback=r.feedback,
                private_notes=r.private_notes,
                assigned_at=r.assigned_at,
                completed_at=r.completed_at,
            ))
        return views

    async def _get_review(self, target: ReviewTarget, review_id: int):
        review = await self.db.get(TARGETS[target].review_model, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        return review

    # ==================== Queries ====================

    async def list_all(self, target: ReviewTarget) -> List[Review]:
        """Every review of a target kind, most recently assigned first."""
        model = TARGETS[target].review_model
        result = await self.db.execute(
            select(model).order_by(model.assigned_at.desc(), model.id.desc())
        )
        return await self._to_admin_views(target, list(result.scalars().all()))

    async def list_for_submission(self, submission_id: int) -> List[Review]:
        result = await self.db.execute(
            select(SubmissionReview)
            .where(SubmissionReview.submission_id == submission_id)
            .order_by(SubmissionReview.assigned_at.desc(), SubmissionReview.id.desc())
        )
        return await self._to_admin_views(ReviewTarget.SUBMISSION, list(result.scalars().all()))

    async def list_mine(self, reviewer_id: int) -> List[ReviewAssignment]:
        """
        The reviewer's assignments across both targets, newest first.
        Author names are left out (single-blind review).
        """
        assignments: List[ReviewAssignment] = []
        for target, tables in TARGETS.items():
            model = tables.review_model
            result = await self.db.execute(
                select(model).where(model.reviewer_id == reviewer_id)
            )
            reviews = list(result.scalars().all())
            targets = await self._targets_by_id(target, [getattr(r, tables.fk_column) for r in reviews])

            for r in reviews:
                assignments.append(self.to_assignment(target, r, targets.get(getattr(r, tables.fk_column))))

        assignments.sort(key=lambda a: (a.assigned_at, a.id), reverse=True)
        return assignments

    # ==================== Mutations ====================

    async def assign(self, target: ReviewTarget, target_id: int, reviewer_id: int) -> List[Review]:
        """
        Assign a reviewer and move the target to under_review.

        Raises:
            ConflictError: The reviewer is already assigned to this target
            AppError: Any other store failure ("Failed to assign reviewer")
        """
        tables = TARGETS[target]
        target_row = await self.db.get(tables.target_model, target_id)
        if target_row is None:
            raise NotFoundError(f"{target.value.capitalize()} not found")
        if await self.db.get(User, reviewer_id) is None:
            raise NotFoundError("Reviewer not found")

        self.db.add(tables.review_model(**{tables.fk_column: target_id, "reviewer_id": reviewer_id}))
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                raise ConflictError(f"Reviewer is already assigned to this {target.value}")
            logger.error(f"Assigning reviewer {reviewer_id} to {target.value} {target_id} failed: {e}", exc_info=True)
            raise AppError("Failed to assign reviewer")

        target_row = await self.db.get(tables.target_model, target_id)
        if target == ReviewTarget.ARTICLE:
            target_row.review_status = UNDER_REVIEW
        else:
            target_row.status = SubmissionStatus.UNDER_REVIEW
        await self.db.commit()

        logger.info(f"Assigned reviewer {reviewer_id} to {target.value} {target_id}")
        return await self.list_all(target)

    async def submit(self, target: ReviewTarget, review_id: int, reviewer: User, data: ReviewSubmit):
        """Complete the caller's own review with a recommendation."""
        review = await self._get_review(target, review_id)
        if review.reviewer_id != reviewer.user_id:
            raise AuthorizationError("You can only submit your own reviews")

        review.status = ReviewStatus.COMPLETED
        review.recommendation = data.recommendation
        review.feedback = data.feedback
        review.private_notes = data.private_notes
        review.completed_at = datetime.utcnow()
        await self.db.commit()

        logger.info(f"Review {target.value}/{review_id} completed: {data.recommendation.value}")
        return review

    async def update_status(self, target: ReviewTarget, review_id: int, user: User, status: ReviewStatus):
        """Assigned reviewer or admin; no transition rules."""
        review = await self._get_review(target, review_id)
        if review.reviewer_id != user.user_id and not user.has_role(AppRole.ADMIN):
            raise AuthorizationError("You can only update your own reviews")

        review.status = status
        if status == ReviewStatus.COMPLETED and review.completed_at is None:
            review.completed_at = datetime.utcnow()
        await self.db.commit()

        logger.info(f"Review {target.value}/{review_id} status -> {status.value}")
        return review

    async def remove(self, target: ReviewTarget, review_id: int) -> List[Review]:
        review = await self._get_review(target, review_id)
        await self.db.delete(review)
        await self.db.commit()
        logger.info(f"Removed review {target.value}/{review_id}")
        return await self.list_all(target)

    def to_assignment(self, target: ReviewTarget, review, target_row=None) -> ReviewAssignment:
        tables = TARGETS[target]
        return ReviewAssignment(
            id=review.id,
            target=target,
            target_id=getattr(review, tables.fk_column),
            target_title=target_row.title if target_row else tables.unknown_title,
            target_abstract=target_row.abstract if target_row else None,
            target_content=getattr(target_row, "content", None),
            target_category=getattr(target_row, "category", None),
            target_keywords=getattr(target_row, "keywords", None),
            status=review.status,
            recommendation=review.recommendation,
            feedback=review.feedback,
            private_notes=review.private_notes,
            assigned_at=review.assigned_at,
            completed_at=review.completed_at,
        )

    async def get_assignment(self, target: ReviewTarget, review) -> ReviewAssignment:
        target_row = await self.db.get(TARGETS[target].target_model, getattr(review, TARGETS[target].fk_column))
        return self.to_assignment(target, review, target_row)


async def get_review_service(
    db: AsyncSession = Depends(get_async_db)
) -> ReviewService:
    return ReviewService(db)
