"""
Notification Service - renders and sends the journal's notification emails.

Sending never raises: a failed notification is logged and reported as
False, and the action that triggered it stands.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from models import Submission, User, Profile
from services.email_service import get_email_service
from services.email_template_service import (
    EmailTemplateService, SubmissionEmailData, build_confirmation_url,
)

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.templates = EmailTemplateService()

    async def load_submission_email_data(self, submission: Submission) -> SubmissionEmailData:
        """Collect title/authors plus the submitter's address and display name."""
        result = await self.db.execute(
            select(User.email, Profile.full_name)
            .outerjoin(Profile, Profile.user_id == User.user_id)
            .where(User.user_id == submission.user_id)
        )
        row = result.first()
        return SubmissionEmailData(
            submission_id=submission.id,
            title=submission.title,
            authors=submission.authors,
            category=submission.category,
            submitter_email=row.email if row else "",
            submitter_name=row.full_name if row else None,
        )

    async def send_submission_notification(
        self,
        submission: Submission,
        admin_email: Optional[str] = None,
    ) -> bool:
        """
        Confirmation to the submitter and, when an editorial address is known,
        an alert to the editors. Returns whether the submitter email went out.
        """
        data = await self.load_submission_email_data(submission)
        email_service = get_email_service()

        sent = False
        if data.submitter_email:
            confirmation = self.templates.submission_received(data)
            sent = await email_service.send_html_email(
                to_email=data.submitter_email,
                subject=confirmation.subject,
                html_content=confirmation.html,
                from_name="Journal Submissions",
            )
            logger.info(f"Submission {submission.id} confirmation sent={sent}")

        admin_email = admin_email or settings.ADMIN_NOTIFICATION_EMAIL
        if admin_email:
            alert = self.templates.new_submission_alert(data)
            admin_sent = await email_service.send_html_email(
                to_email=admin_email,
                subject=alert.subject,
                html_content=alert.html,
                from_name="Journal Submissions",
            )
            logger.info(f"Submission {submission.id} admin alert sent={admin_sent}")

        return sent

    async def send_auth_email(
        self,
        action_type: str,
        email: str,
        full_name: Optional[str],
        token_hash: str,
        site_url: Optional[str] = None,
        redirect_to: Optional[str] = None,
    ) -> bool:
        site_url = (site_url or settings.FRONTEND_URL).rstrip("/")
        url = build_confirmation_url(site_url, token_hash, action_type, redirect_to)
        rendered = self.templates.auth_email(action_type, full_name, url)
        sent = await get_email_service().send_html_email(
            to_email=email,
            subject=rendered.subject,
            html_content=rendered.html,
            from_name=settings.JOURNAL_NAME,
        )
        logger.info(f"Auth email ({action_type}) to {email} sent={sent}")
        return sent


async def notify_submission_created(submission_id: int) -> None:
    """
    Background task run after a submission is created.

    Uses its own session because the request's session is closed by the time
    background tasks run.
    """
    from database import AsyncSessionLocal

    try:
        async with AsyncSessionLocal() as db:
            submission = await db.get(Submission, submission_id)
            if submission is None:
                logger.warning(f"Submission {submission_id} vanished before notification")
                return
            await NotificationService(db).send_submission_notification(submission)
    except Exception as e:
        logger.error(f"Submission notification failed for {submission_id}: {e}", exc_info=True)
