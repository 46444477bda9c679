"""
Auth Service - Authentication and token management.

This service owns:
- JWT token creation and validation
- Login/registration flows and login activity
- Email action tokens (signup confirmation, password recovery)
- Route guards: signed in, optionally signed in, admin, reviewer

User CRUD operations are handled by user_service.
"""

from datetime import datetime, timedelta
from typing import List, Optional, TypedDict
from jose import JWTError, ExpiredSignatureError, jwt
from fastapi import HTTPException, status, Depends, Security, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from models import User, LoginActivity, AppRole
from schemas.user import Token
from services.user_service import UserService
from config.settings import settings
from database import get_async_db
import hashlib
import hmac
import logging
import time

SECRET_KEY = settings.JWT_SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
# Refresh token when this percentage of lifetime has passed (e.g., 0.8 = 80%)
TOKEN_REFRESH_THRESHOLD = 0.8
# Lifetimes of the links sent by email, matching what the emails promise
EMAIL_TOKEN_EXPIRY = {
    "signup": timedelta(hours=24),
    "email_change": timedelta(hours=24),
    "recovery": timedelta(hours=1),
}
logger = logging.getLogger(__name__)

# auto_error=False so a missing header yields 401 (not 403) and optional auth works
security = HTTPBearer(auto_error=False)


class TokenPayload(TypedDict, total=False):
    """Strongly-typed JWT token payload."""
    sub: str          # Subject (email)
    user_id: int      # User ID
    username: str     # Display username
    roles: List[str]  # Role values held when the token was issued
    iat: int          # Issued-at timestamp (added automatically)
    exp: datetime     # Expiration (added automatically)


def create_access_token(data: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Token payload data
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode: dict = dict(data)
    now = datetime.utcnow()

    # Use time.time() for consistent UTC timestamp (datetime.utcnow().timestamp() has timezone issues)
    if "iat" not in to_encode:
        to_encode["iat"] = int(time.time())

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    logger.info(f"Created access token for user_id={data.get('user_id')}")
    return encoded_jwt


def _token_data_for_user(user: User) -> TokenPayload:
    return {
        "sub": user.email,
        "user_id": user.user_id,
        "username": user.email.split('@')[0],
        "roles": user.role_names,
    }


def create_token_for_user(user: User) -> Token:
    """Create a Token response for an authenticated user."""
    token_data = _token_data_for_user(user)
    access_token = create_access_token(data=token_data)

    return Token(
        access_token=access_token,
        token_type="bearer",
        username=token_data["username"],
        roles=[AppRole(r) for r in token_data["roles"]],
        user_id=user.user_id,
        email=user.email
    )


# ==================== Email action tokens ====================

def password_fingerprint(user: User) -> str:
    """
    Short keyed digest of the stored password hash. Recovery tokens carry it,
    so a reset link stops working once the password has changed.
    """
    return hmac.new(SECRET_KEY.encode(), user.password.encode(), hashlib.sha256).hexdigest()[:16]


def create_email_action_token(user: User, action: str) -> str:
    """Signed, short-lived token carried by signup/recovery/email-change links."""
    expires = EMAIL_TOKEN_EXPIRY.get(action, EMAIL_TOKEN_EXPIRY["signup"])
    claims = {
        "sub": user.email,
        "user_id": user.user_id,
        "purpose": action,
        "exp": datetime.utcnow() + expires,
    }
    if action == "recovery":
        claims["pwh"] = password_fingerprint(user)
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_email_action_token(token: str, action: str) -> dict:
    """
    Return the verified claims of an email action token (user_id, purpose
    and, for recovery links, the password fingerprint).

    Raises:
        HTTPException 400: If the token is invalid, expired or for another action
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Link has expired")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired link")

    if payload.get("purpose") != action or payload.get("user_id") is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired link")
    return payload


# ==================== Login / registration ====================

async def login_user(
    db: AsyncSession,
    email: str,
    password: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Token:
    """
    Authenticate user, record the login and return a JWT token.

    Raises:
        HTTPException: If credentials invalid or user inactive
    """
    logger.info(f"Login attempt for: {email}")

    user_service = UserService(db)
    user = await user_service.verify_credentials(email, password)

    if not user:
        logger.warning(f"Failed login attempt for: {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    db.add(LoginActivity(
        user_id=user.user_id,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
    ))
    await db.commit()

    logger.info(f"Successful login for: {email}")
    return create_token_for_user(user)


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    full_name: Optional[str] = None,
) -> User:
    """Create the account (user, profile, default role)."""
    logger.info(f"Registering new user: {email}")
    user_service = UserService(db)
    user = await user_service.create_user(email=email, password=password, full_name=full_name)
    logger.info(f"Successfully registered user: {email}")
    return user


# ==================== Route guards ====================

async def _user_from_token(
    request: Request,
    token: str,
    db: AsyncSession,
) -> User:
    t_start = time.perf_counter()
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired"
        )
    except JWTError as e:
        logger.error(f"JWT validation error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    email: Optional[str] = payload.get("sub")
    if email is None or payload.get("purpose"):
        logger.error("Token missing email claim or is an email action token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    user_service = UserService(db)
    user = await user_service.get_user_by_email(email)
    if user is None:
        logger.error(f"Token user not found: {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        logger.warning(f"Inactive user attempted access: {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is deactivated"
        )

    # Roles granted or revoked since issue force a refresh so the client sees them
    token_roles = sorted(payload.get("roles") or [])
    roles_changed = token_roles != user.role_names
    if roles_changed:
        logger.info(f"Roles changed for {email}: token={token_roles}, db={user.role_names} - will refresh token")

    should_refresh = False
    exp_timestamp = payload.get('exp')
    iat_timestamp = payload.get('iat')
    current_time = int(time.time())

    if exp_timestamp:
        if iat_timestamp:
            total_lifetime = exp_timestamp - iat_timestamp
            time_elapsed = current_time - iat_timestamp
            lifetime_used = time_elapsed / total_lifetime if total_lifetime > 0 else 0
            should_refresh = lifetime_used >= TOKEN_REFRESH_THRESHOLD
        else:
            # No iat claim - refresh when less than 20% of the default lifetime remains
            threshold_seconds = ACCESS_TOKEN_EXPIRE_MINUTES * 60 * (1 - TOKEN_REFRESH_THRESHOLD)
            should_refresh = (exp_timestamp - current_time) < threshold_seconds

    if should_refresh or roles_changed:
        request.state.new_token = create_access_token(data=_token_data_for_user(user))
        logger.debug(f"Generated refresh token for {email}")

    logger.debug(f"validate_token - email={email}, total={time.perf_counter() - t_start:.3f}s")
    return user


async def validate_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: AsyncSession = Depends(get_async_db)
) -> User:
    """
    Validate JWT token and return user.

    This is used as a dependency in routers: Depends(validate_token)

    If the token is valid but past the refresh threshold (80% of lifetime),
    a new token is generated and stored in request.state.new_token for
    the middleware to return in the X-New-Token response header.

    Raises:
        HTTPException 401: If the token is missing or invalid, or the user is unknown
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await _user_from_token(request, credentials.credentials, db)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: AsyncSession = Depends(get_async_db)
) -> Optional[User]:
    """Like validate_token, but anonymous callers get None instead of a 401."""
    if credentials is None:
        return None
    return await _user_from_token(request, credentials.credentials, db)


async def require_admin(current_user: User = Depends(validate_token)) -> User:
    """Dependency that requires the admin role."""
    if not current_user.has_role(AppRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


async def require_reviewer(current_user: User = Depends(validate_token)) -> User:
    """Dependency that requires the reviewer role (admins pass too)."""
    if not (current_user.has_role(AppRole.REVIEWER) or current_user.has_role(AppRole.ADMIN)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Reviewer access required"
        )
    return current_user
