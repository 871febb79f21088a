"""
Account endpoints: the caller's own profile and listings, plus admin user management.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from typing import List

from homeverse.models.user import User
from homeverse.services.auth import AuthService
from homeverse.services.property import PropertyService
from homeverse.services.user import UserService
from homeverse.schemas.user import UserUpdate, UserResponse
from homeverse.schemas.property import PropertyResponse
from homeverse.schemas.error import get_auth_error_responses, get_error_responses
from homeverse.utils.dependencies import (
    get_auth_service,
    get_current_user,
    get_current_admin_user,
    get_property_service,
    get_user_service,
)


router = APIRouter(tags=["Users"])


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Get current user",
    responses=get_error_responses(401)
)
async def get_current_user_info(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put(
    "/user",
    response_model=UserResponse,
    summary="Update current user",
    description="Change profile fields, email or password of the logged-in user",
    responses=get_error_responses(400, 401, 409)
)
async def update_current_user(
    update_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.update_profile(current_user, update_data)
    return UserResponse.model_validate(user)


@router.get(
    "/user/properties",
    response_model=List[PropertyResponse],
    summary="Current user's properties",
    responses=get_error_responses(401)
)
async def list_current_user_properties(
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_user_properties(current_user)
    return [PropertyResponse.model_validate(p) for p in properties]


@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List users",
    description="All accounts. Admin only.",
    responses=get_auth_error_responses()
)
async def list_users(
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> List[UserResponse]:
    users = await user_service.list_users()
    return [UserResponse.model_validate(u) for u in users]


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete an account with its properties, inquiries, favorites and sessions. Admin only.",
    responses=get_error_responses(401, 403, 404)
)
async def delete_user(
    user_id: int = Path(..., description="User ID"),
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> Response:
    await user_service.delete_user(user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
