"""
Callable notification functions.

- send-submission-notification: bearer token required; the caller must own
  the submission. Identity comes from the verified token, never the body.
- auth-email: renders the signup / recovery / email-change message. When
  AUTH_EMAIL_HOOK_SECRET is configured the caller must present it in the
  X-Hook-Secret header.

Both answer {success, message}; a failed send is reported, not raised.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from database import get_async_db
from models import AppRole, User
from schemas.notification import AuthEmailRequest, NotificationResponse, SubmissionNotificationRequest
from services import auth_service
from services.notification_service import NotificationService
from services.submission_service import SubmissionService, get_submission_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/functions", tags=["functions"])


def verify_hook_secret(x_hook_secret: Optional[str] = Header(None)) -> None:
    expected = settings.AUTH_EMAIL_HOOK_SECRET
    if expected and not hmac.compare_digest(x_hook_secret or "", expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid hook secret")


@router.post(
    "/send-submission-notification",
    response_model=NotificationResponse,
    summary="Email the submission confirmation and editor alert",
)
async def send_submission_notification(
    body: SubmissionNotificationRequest,
    current_user: User = Depends(auth_service.validate_token),
    submissions: SubmissionService = Depends(get_submission_service),
    db: AsyncSession = Depends(get_async_db),
):
    submission = await submissions.get_submission(body.submission_id)
    is_admin = current_user.has_role(AppRole.ADMIN)
    # Editors may resend for any submission; authors only for their own
    if submission.user_id != current_user.user_id and not is_admin:
        logger.warning(
            f"User {current_user.user_id} asked to notify about submission {submission.id} "
            f"owned by {submission.user_id}"
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this submission")

    # A custom editorial address is honoured for admins only
    admin_email = body.admin_email if is_admin else None
    sent = await NotificationService(db).send_submission_notification(submission, admin_email=admin_email)
    return NotificationResponse(
        success=sent,
        message="Notification sent" if sent else "Notification could not be delivered",
    )


@router.post(
    "/auth-email",
    response_model=NotificationResponse,
    summary="Send an authentication email",
    dependencies=[Depends(verify_hook_secret)],
)
async def send_auth_email(body: AuthEmailRequest, db: AsyncSession = Depends(get_async_db)):
    """Unknown action types get the signup template."""
    full_name = body.user.user_metadata.full_name if body.user.user_metadata else None
    sent = await NotificationService(db).send_auth_email(
        action_type=body.email_data.email_action_type,
        email=body.user.email,
        full_name=full_name,
        token_hash=body.email_data.token_hash,
        site_url=body.email_data.site_url,
        redirect_to=body.email_data.redirect_to,
    )
    return NotificationResponse(
        success=sent,
        message="Email sent" if sent else "Email could not be delivered",
    )
