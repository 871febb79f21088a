"""
Service layer for business logic implementation.
Contains services for authentication, listings, inquiries, favorites, users and error handling.
"""

from .auth import AuthService
from .property import PropertyService
from .inquiry import InquiryService
from .favorite import FavoriteService
from .user import UserService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "PropertyService",
    "InquiryService",
    "FavoriteService",
    "UserService",
    "ErrorHandlerService",
]
