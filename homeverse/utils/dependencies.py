"""
FastAPI dependency injection utilities for storage, services and session authentication.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import AsyncIterator, Optional
from fastapi import Depends, Request
from homeverse.config import Settings
from homeverse.models.user import User, UserRole
from homeverse.repositories.interface import StorageRepository
from homeverse.repositories.database import DatabaseStorage
from homeverse.repositories.memory import MemoryStorage
from homeverse.services.auth import AuthService
from homeverse.services.property import PropertyService
from homeverse.services.inquiry import InquiryService
from homeverse.services.favorite import FavoriteService
from homeverse.services.user import UserService
from homeverse.utils.exceptions import UnauthorizedError, InsufficientPermissionsError


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


async def get_storage(request: Request) -> AsyncIterator[StorageRepository]:
    """
    Yield the configured storage backend for one request.
    The database backend gets its own session that is closed afterwards.
    """
    memory_state = getattr(request.app.state, "memory_state", None)
    if memory_state is not None:
        yield MemoryStorage(memory_state)
        return

    async with request.app.state.database.session() as session:
        yield DatabaseStorage(session)


async def get_auth_service(
    storage: StorageRepository = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
) -> AuthService:
    return AuthService(storage, settings)


async def get_property_service(
    storage: StorageRepository = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
) -> PropertyService:
    return PropertyService(storage, settings)


async def get_inquiry_service(storage: StorageRepository = Depends(get_storage)) -> InquiryService:
    return InquiryService(storage)


async def get_favorite_service(storage: StorageRepository = Depends(get_storage)) -> FavoriteService:
    return FavoriteService(storage)


async def get_user_service(
    storage: StorageRepository = Depends(get_storage),
    property_service: PropertyService = Depends(get_property_service)
) -> UserService:
    return UserService(storage, property_service)


def get_session_token(request: Request) -> Optional[str]:
    """Read the session cookie, if any."""
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def get_optional_current_user(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get the logged-in user, or None for anonymous requests.

    Args:
        token: Session cookie value
        auth_service: Authentication service

    Returns:
        User object if the session is valid, None otherwise
    """
    return await auth_service.get_user_for_session(token)


async def get_current_user(
    current_user: Optional[User] = Depends(get_optional_current_user)
) -> User:
    """
    Get the logged-in user.

    Raises:
        UnauthorizedError: If there is no valid session
    """
    if current_user is None:
        raise UnauthorizedError("Not authenticated")
    return current_user


def require_roles(*roles: UserRole):
    """
    Create a dependency that requires one of the given roles.

    Args:
        roles: Roles allowed through

    Returns:
        Dependency function yielding the current user
    """
    allowed = set(roles)

    async def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            names = ", ".join(sorted(role.value for role in allowed))
            raise InsufficientPermissionsError(f"access this resource (requires {names})")
        return current_user

    return role_dependency


get_current_admin_user = require_roles(UserRole.ADMIN)
get_current_staff_user = require_roles(UserRole.ADMIN, UserRole.AGENT)
get_current_lister = require_roles(UserRole.SELLER, UserRole.AGENT, UserRole.ADMIN)
