"""
Authentication API endpoints for registration, login, logout and the current user.
Provides cookie-based sessions backed by the session table.
"""

from fastapi import APIRouter, Depends, Response, status
from homeverse.config import Settings
from homeverse.services.auth import AuthService
from homeverse.schemas.user import RegisterRequest, LoginRequest, UserResponse
from homeverse.schemas.error import get_error_responses
from homeverse.utils.dependencies import (
    get_app_settings,
    get_auth_service,
    get_session_token,
)
from typing import Optional


router = APIRouter(tags=["Authentication"])


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create a buyer or seller account and log it in",
    responses=get_error_responses(400, 409)
)
async def register(
    user_data: RegisterRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings)
) -> UserResponse:
    """
    Register and start a session.

    Args:
        user_data: Registration payload
        response: Outgoing response, receives the session cookie
        auth_service: Authentication service
        settings: Application settings

    Returns:
        The created user
    """
    user = await auth_service.register(user_data)
    token = await auth_service.start_session(user)
    _set_session_cookie(response, token, settings)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with username (or email) and password; sets the session cookie",
    responses=get_error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings)
) -> UserResponse:
    user, token = await auth_service.login(login_data.username, login_data.password)
    _set_session_cookie(response, token, settings)
    return UserResponse.model_validate(user)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="User logout",
    description="End the current session and clear the cookie"
)
async def logout(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings)
) -> Response:
    await auth_service.logout(token)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.session_cookie_name, httponly=True, samesite="lax")
    return response
