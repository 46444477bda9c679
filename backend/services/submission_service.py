"""
Submission Service - author manuscript submissions.

This service owns:
- Submission CRUD with owner/admin visibility
- Admin status changes
- Access checks for the private manuscript files
- Converting an accepted submission into a journal article
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import AuthorizationError, NotFoundError, ValidationError
from models import AppRole, Article, Submission, SubmissionReview, SubmissionStatus, User
from schemas.submission import (
    ConvertToArticleRequest, SubmissionCreate, SubmissionFileType, SubmissionUpdate,
)

logger = logging.getLogger(__name__)


class SubmissionService:

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Queries ====================

    async def list_submissions(self, user: User) -> List[Submission]:
        """Admins see every submission; authors see their own. Newest first."""
        stmt = select(Submission).order_by(Submission.created_at.desc(), Submission.id.desc())
        if not user.has_role(AppRole.ADMIN):
            stmt = stmt.where(Submission.user_id == user.user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_submission(self, submission_id: int) -> Submission:
        submission = await self.db.get(Submission, submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        return submission

    async def get_for_user(self, submission_id: int, user: User) -> Submission:
        submission = await self.get_submission(submission_id)
        if submission.user_id != user.user_id and not user.has_role(AppRole.ADMIN):
            raise NotFoundError("Submission not found")
        return submission

    async def is_assigned_reviewer(self, submission_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(SubmissionReview.id).where(
                SubmissionReview.submission_id == submission_id,
                SubmissionReview.reviewer_id == user_id,
            )
        )
        return result.first() is not None

    async def get_file_path(self, submission_id: int, file_type: SubmissionFileType, user: User) -> str:
        """
        Storage path of a submission file, if the caller may read it.

        Readers: the submitting author, admins, and reviewers assigned to
        the submission.
        """
        submission = await self.get_submission(submission_id)
        allowed = (
            submission.user_id == user.user_id
            or user.has_role(AppRole.ADMIN)
            or await self.is_assigned_reviewer(submission_id, user.user_id)
        )
        if not allowed:
            raise AuthorizationError("You do not have access to this file")

        path = submission.manuscript_url if file_type == SubmissionFileType.MANUSCRIPT else submission.supplementary_url
        if not path:
            raise NotFoundError("No file uploaded")
        return path

    # ==================== Mutations ====================

    async def create(self, user: User, data: SubmissionCreate) -> Submission:
        submission = Submission(
            user_id=user.user_id,
            status=SubmissionStatus.PENDING,
            **data.model_dump(),
        )
        self.db.add(submission)
        await self.db.commit()
        await self.db.refresh(submission)
        logger.info(f"User {user.user_id} created submission {submission.id}")
        return submission

    async def update(self, submission_id: int, user: User, data: SubmissionUpdate) -> Submission:
        submission = await self.get_for_user(submission_id, user)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(submission, field, value)
        await self.db.commit()
        await self.db.refresh(submission)
        logger.info(f"Submission {submission_id} updated by user {user.user_id}")
        return submission

    async def update_status(
        self,
        submission_id: int,
        status: SubmissionStatus,
        admin_notes: Optional[str] = None,
    ) -> Submission:
        """Any status may follow any other."""
        submission = await self.get_submission(submission_id)
        submission.status = status
        if admin_notes is not None:
            submission.admin_notes = admin_notes
        await self.db.commit()
        await self.db.refresh(submission)
        logger.info(f"Submission {submission_id} status -> {status.value}")
        return submission

    async def convert_to_article(
        self,
        submission_id: int,
        request: ConvertToArticleRequest,
        created_by: int,
    ) -> Article:
        """Create an article pre-filled from the submission; overrides win."""
        submission = await self.get_submission(submission_id)
        overrides = request.model_dump(exclude={"publish_immediately"}, exclude_none=True)

        title = overrides.pop("title", submission.title)
        if not title.strip():
            raise ValidationError("Title is required")

        article = Article(
            title=title,
            abstract=overrides.pop("abstract", submission.abstract),
            authors=overrides.pop("authors", submission.authors),
            category=overrides.pop("category", submission.category),
            created_by=created_by,
            published_at=datetime.utcnow() if request.publish_immediately else None,
            **overrides,
        )
        self.db.add(article)
        await self.db.commit()
        await self.db.refresh(article)
        logger.info(f"Submission {submission_id} converted to article {article.id}")
        return article


async def get_submission_service(
    db: AsyncSession = Depends(get_async_db)
) -> SubmissionService:
    return SubmissionService(db)
