"""
Utility modules for the HomeVerse Listings API.
"""

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    InvalidCredentialsError,
    InsufficientPermissionsError,
    DuplicateResourceError,
    FileUploadError,
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "InvalidCredentialsError",
    "InsufficientPermissionsError",
    "DuplicateResourceError",
    "FileUploadError",
]
