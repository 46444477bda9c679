from fastapi import APIRouter, Depends, HTTPException, Request, status, Form
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, EmailStr, Field
from typing import Annotated, Optional
import logging

from database import get_async_db
from exceptions import AppError
from models import AccountStatus, User
from schemas.user import Token, User as UserSchema

from services import auth_service
from services.notification_service import NotificationService
from services.profile_service import ProfileService
from services.user_service import UserService, get_user_service

logger = logging.getLogger(__name__)

# Re-export validate_token as get_current_user for convenient importing by other routers
# Usage: from routers.auth import get_current_user
get_current_user = auth_service.validate_token


# ============== Request Schemas ==============

class RegisterRequest(BaseModel):
    """Request schema for user registration."""
    email: EmailStr = Field(description="User's email address")
    password: str = Field(min_length=6, description="User's password")
    full_name: Optional[str] = Field(default=None, max_length=255, description="Display name")


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str = Field(min_length=6)


class EmailConfirmation(BaseModel):
    token_hash: str
    type: str = "signup"


class MessageResponse(BaseModel):
    message: str


router = APIRouter()


async def _send_auth_link(db: AsyncSession, user: User, action: str, full_name: Optional[str] = None) -> None:
    """Email a signed action link. Delivery failures are logged by the sender."""
    token_hash = auth_service.create_email_action_token(user, action)
    await NotificationService(db).send_auth_email(
        action_type=action,
        email=user.email,
        full_name=full_name,
        token_hash=token_hash,
    )


@router.post(
    "/register",
    response_model=Token,
    summary="Register a new user and automatically log them in"
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_async_db)):
    """
    Register a new user and automatically log them in with:
    - **email**: valid email address
    - **password**: at least 6 characters
    - **full_name**: optional display name

    The account starts unverified; a confirmation link is emailed.
    """
    user = await auth_service.register_user(db, body.email, body.password, body.full_name)
    await _send_auth_link(db, user, "signup", body.full_name)
    return auth_service.create_token_for_user(user)


@router.post(
    "/login",
    response_model=Token,
    summary="Login to get JWT token",
    responses={401: {"description": "Invalid credentials"}}
)
async def login(
    request: Request,
    username: Annotated[str, Form(description="User's email address")],
    password: Annotated[str, Form(description="User's password")],
    db: AsyncSession = Depends(get_async_db)
):
    """
    Login with email and password to get a JWT token.

    - **username**: email address
    - **password**: user password
    """
    try:
        return await auth_service.login_user(
            db,
            username,
            password,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login failed for {username}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sign in"
        )


@router.get("/me", response_model=UserSchema, summary="Current user")
async def me(current_user: User = Depends(get_current_user)):
    return UserSchema(
        user_id=current_user.user_id,
        email=current_user.email,
        roles=current_user.role_names,
        is_active=current_user.is_active,
        created_at=current_user.created_at,
    )


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Email a password reset link"
)
async def forgot_password(
    body: PasswordResetRequest,
    db: AsyncSession = Depends(get_async_db),
    user_service: UserService = Depends(get_user_service)
):
    """The answer is the same whether or not the address is registered."""
    user = await user_service.get_user_by_email(body.email)
    if user is not None:
        await _send_auth_link(db, user, "recovery")
    else:
        logger.info(f"Password reset requested for unknown address {body.email}")
    return MessageResponse(message="If an account with this email exists, a reset link has been sent.")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Set a new password from a reset link"
)
async def reset_password(
    body: PasswordResetConfirm,
    user_service: UserService = Depends(get_user_service)
):
    claims = auth_service.decode_email_action_token(body.token, "recovery")
    user_id = int(claims["user_id"])
    user = await user_service.get_user_by_id(user_id)
    # Single use: the fingerprint no longer matches once the password changed
    if user is None or claims.get("pwh") != auth_service.password_fingerprint(user):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired link")
    await user_service.update_password(user, body.new_password)
    logger.info(f"Password reset for user {user_id}")
    return MessageResponse(message="Your password has been updated.")


@router.post(
    "/confirm",
    response_model=MessageResponse,
    summary="Confirm an email address from a signup link"
)
async def confirm_email(body: EmailConfirmation, db: AsyncSession = Depends(get_async_db)):
    if body.type != "signup":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported confirmation type")

    user_id = int(auth_service.decode_email_action_token(body.token_hash, "signup")["user_id"])
    try:
        await ProfileService(db).set_account_status(user_id, AccountStatus.VERIFIED)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Email confirmation failed for user {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to confirm email"
        )
    return MessageResponse(message="Your email has been confirmed.")
