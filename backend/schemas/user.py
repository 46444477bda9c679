"""
User schemas for the Journal Platform

Core user types. Request schemas (RegisterRequest, RoleAssignment, etc.)
are in the routers.

Section order:
  1. Enums
  2. User Types
  3. Auth Types
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime

# ============================================================================
# ENUMS
# ============================================================================

# Enumerations are shared with the ORM layer so a status or role can never
# drift between the table definition and the API contract.
from models import AppRole, AccountStatus


# ============================================================================
# USER TYPES
# ============================================================================


class User(BaseModel):
    """
    Full user schema.
    This is the canonical representation of a user in API responses.
    """
    user_id: int = Field(description="Unique identifier")
    email: EmailStr = Field(description="User's email address")
    roles: List[AppRole] = Field(default_factory=list, description="Roles held by the user")
    is_active: bool = Field(default=True, description="Whether user is active")
    created_at: datetime = Field(description="Record creation timestamp")


class UserWithProfile(BaseModel):
    """User row as shown in the admin user list."""
    user_id: int
    email: EmailStr
    full_name: Optional[str] = None
    username: Optional[str] = None
    account_status: Optional[AccountStatus] = None
    roles: List[AppRole] = Field(default_factory=list)
    created_at: datetime


class UserList(BaseModel):
    users: List[UserWithProfile]
    total: int


# ============================================================================
# AUTH TYPES
# ============================================================================


class Token(BaseModel):
    """Authentication response with JWT token."""
    access_token: str = Field(description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: int = Field(description="User's unique identifier")
    email: str = Field(description="User's email address")
    username: str = Field(description="Display username (from email)")
    roles: List[AppRole] = Field(default_factory=list, description="Roles held by the user")
