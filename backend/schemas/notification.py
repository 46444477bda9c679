"""
Request/response bodies of the two callable notification functions.

Field names follow the JSON the web client already sends (camelCase for
the submission notification, snake_case for the auth email hook).
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class SubmissionNotificationRequest(BaseModel):
    """
    Only the submission id is trusted. Title, authors and the submitter's
    address are re-read from the store for the verified caller.
    """
    model_config = ConfigDict(populate_by_name=True)

    submission_id: int = Field(alias="submissionId")
    admin_email: Optional[EmailStr] = Field(None, alias="adminEmail")


class NotificationResponse(BaseModel):
    success: bool
    message: Optional[str] = None


class AuthEmailUserMetadata(BaseModel):
    full_name: Optional[str] = None


class AuthEmailUser(BaseModel):
    email: EmailStr
    user_metadata: Optional[AuthEmailUserMetadata] = None


class AuthEmailData(BaseModel):
    token: Optional[str] = None
    token_hash: str
    redirect_to: Optional[str] = None
    email_action_type: str
    site_url: str


class AuthEmailRequest(BaseModel):
    user: AuthEmailUser
    email_data: AuthEmailData
