"""
Reviewer Application Service

Anyone may apply to join the reviewer pool; signed-in applicants are linked
to their account. Admins move applications between pending, under_review,
approved and rejected in any order, and every change stamps who made it
and when.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_async_db
from exceptions import NotFoundError
from models import ApplicationStatus, ReviewerApplication
from schemas.reviewer_application import ReviewerApplicationCreate

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    ApplicationStatus.APPROVED: "Application approved",
    ApplicationStatus.REJECTED: "Application rejected",
}


class ReviewerApplicationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit(self, data: ReviewerApplicationCreate, user_id: Optional[int] = None) -> ReviewerApplication:
        application = ReviewerApplication(
            user_id=user_id,
            status=ApplicationStatus.PENDING,
            **data.model_dump(),
        )
        self.db.add(application)
        await self.db.commit()
        await self.db.refresh(application)
        logger.info(f"Reviewer application {application.id} submitted (user_id={user_id})")
        return application

    async def list_applications(self, status: Optional[ApplicationStatus] = None) -> List[ReviewerApplication]:
        stmt = select(ReviewerApplication).order_by(
            ReviewerApplication.created_at.desc(), ReviewerApplication.id.desc()
        )
        if status is not None:
            stmt = stmt.where(ReviewerApplication.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(self, user_id: int) -> List[ReviewerApplication]:
        result = await self.db.execute(
            select(ReviewerApplication)
            .where(ReviewerApplication.user_id == user_id)
            .order_by(ReviewerApplication.created_at.desc(), ReviewerApplication.id.desc())
        )
        return list(result.scalars().all())

    async def _get(self, application_id: int) -> ReviewerApplication:
        application = await self.db.get(ReviewerApplication, application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def update_status(
        self,
        application_id: int,
        status: ApplicationStatus,
        reviewed_by: int,
        admin_notes: Optional[str] = None,
    ) -> Tuple[ReviewerApplication, str]:
        """Unconditional update. Returns the application and a status message."""
        application = await self._get(application_id)
        application.status = status
        if admin_notes is not None:
            application.admin_notes = admin_notes
        application.reviewed_by = reviewed_by
        application.reviewed_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(application)

        logger.info(f"Reviewer application {application_id} -> {status.value} by user {reviewed_by}")
        return application, STATUS_MESSAGES.get(status, "Application updated")

    async def delete(self, application_id: int) -> None:
        application = await self._get(application_id)
        await self.db.delete(application)
        await self.db.commit()
        logger.info(f"Reviewer application {application_id} deleted")


async def get_reviewer_application_service(
    db: AsyncSession = Depends(get_async_db)
) -> ReviewerApplicationService:
    return ReviewerApplicationService(db)
