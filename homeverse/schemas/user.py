"""
Pydantic schemas for account requests and responses.
Handles registration, login and profile data validation.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from homeverse.models.user import UserRole

# Roles a visitor may pick when signing up
SELF_SERVICE_ROLES = (UserRole.BUYER, UserRole.SELLER)


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class RegisterRequest(BaseModel):
    """Registration request schema."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Unique login name",
        examples=["janedoe"]
    )
    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jane@example.com"]
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="User's password (minimum 6 characters)"
    )
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    role: UserRole = Field(
        default=UserRole.BUYER,
        description="Account role; buyer or seller",
        examples=["buyer"]
    )

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        """Usernames are single tokens without whitespace."""
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("Username cannot contain whitespace")
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator('first_name', 'last_name', 'phone')
    @classmethod
    def clean_optional(cls, v):
        return _strip_optional(v)

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v not in SELF_SERVICE_ROLES:
            raise ValueError("Role must be 'buyer' or 'seller'")
        return v


class LoginRequest(BaseModel):
    """Login request schema. The username field also accepts an email."""

    username: str = Field(
        ...,
        min_length=1,
        description="Username or email address",
        examples=["janedoe"]
    )
    password: str = Field(..., min_length=1, description="User's password")


class UserUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    avatar: Optional[str] = Field(None, max_length=500)
    password: Optional[str] = Field(None, min_length=6, max_length=128)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v

    @field_validator('first_name', 'last_name', 'phone', 'avatar')
    @classmethod
    def clean_optional(cls, v):
        return _strip_optional(v)


class UserResponse(BaseModel):
    """User response schema (excluding sensitive data)."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="User's unique identifier", examples=[1])
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    role: UserRole
    created_at: datetime
