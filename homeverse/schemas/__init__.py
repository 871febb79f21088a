"""
Pydantic schemas for request/response validation.
"""

# User schemas
from .user import (
    RegisterRequest,
    LoginRequest,
    UserUpdate,
    UserResponse,
)

# Property schemas
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
)

# Inquiry and favorite schemas
from .inquiry import InquiryCreate, InquiryUpdate, InquiryResponse
from .favorite import FavoriteCreate, FavoriteResponse

# Error schemas
from .error import ErrorDetail, ErrorResponse, APIErrorResponse

__all__ = [
    # User
    "RegisterRequest",
    "LoginRequest",
    "UserUpdate",
    "UserResponse",

    # Property
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",

    # Inquiry / favorite
    "InquiryCreate",
    "InquiryUpdate",
    "InquiryResponse",
    "FavoriteCreate",
    "FavoriteResponse",

    # Error
    "ErrorDetail",
    "ErrorResponse",
    "APIErrorResponse",
]
