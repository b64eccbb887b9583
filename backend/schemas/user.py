"""
User schemas for the bug tracker.

Section order:
  1. User Types
  2. Auth Request Types
  3. Auth Response Types
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from models import UserRole


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _strip(value):
    if isinstance(value, str):
        return value.strip()
    return value


# ============================================================================
# USER TYPES
# ============================================================================


class User(BaseModel):
    """
    Outward representation of a user. Has no password field, so a hash can
    never leak through a response.
    """
    id: str = Field(description="Unique identifier")
    name: str = Field(description="Display name")
    email: EmailStr = Field(description="User's email address")
    role: UserRole = Field(description="User's privilege level")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Minimal user info embedded in auth responses."""
    id: str
    name: str
    email: EmailStr
    role: UserRole

    model_config = {"from_attributes": True}


# ============================================================================
# AUTH REQUEST TYPES
# ============================================================================


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(description="User's email address")
    password: str = Field(description="Plaintext password, hashed before storage")
    role: UserRole = Field(default=UserRole.USER, description="Requested role")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


# ============================================================================
# AUTH RESPONSE TYPES
# ============================================================================


class AuthData(BaseModel):
    """Payload of signup, login and profile responses."""
    token: str = Field(description="Signed bearer token")
    user: UserSummary
