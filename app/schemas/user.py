"""
Pydantic schemas for users and authentication.

This module defines the request and response schemas for login, the
current-user endpoints and account management.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings


def _check_password_length(value: str) -> str:
    if len(value) < settings.security.password_min_length:
        raise ValueError(
            f"Password must be at least {settings.security.password_min_length} characters"
        )
    return value


class LoginRequest(BaseModel):
    """Schema for JSON login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    """The user as returned with a token or by ``/auth/check``."""

    id: int
    username: str
    role: str
    full_name: str
    email: Optional[str] = ""
    team_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class User(UserSummary):
    """Schema for user response data."""

    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class Token(BaseModel):
    """Schema for authentication token."""

    access_token: str
    token_type: str = "bearer"
    user: UserSummary


class AuthCheck(BaseModel):
    authenticated: bool
    user: Optional[UserSummary] = None


class AccountBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="Username must be 3-50 characters")
    password: str
    full_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field("", max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return _check_password_length(v)


class FieldStaffCreate(AccountBase):
    """Schema for creating a field staff account; always bound to a team."""

    team_id: int


class PartnerCreate(AccountBase):
    """Schema for creating a partner account."""

    team_id: Optional[int] = None


class TeamMember(BaseModel):
    id: int
    username: str
    full_name: str
    email: Optional[str] = ""
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Partner(TeamMember):
    team_id: Optional[int] = None
    team_name: Optional[str] = None


class Created(BaseModel):
    """Acknowledgement returned by create endpoints."""

    success: bool = True
    id: int


class Success(BaseModel):
    success: bool = True
