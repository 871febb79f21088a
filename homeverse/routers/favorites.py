"""
Favorite endpoints for the logged-in user.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from typing import List

from homeverse.models.user import User
from homeverse.services.favorite import FavoriteService
from homeverse.schemas.favorite import FavoriteCreate, FavoriteResponse
from homeverse.schemas.error import get_error_responses
from homeverse.utils.dependencies import get_current_user, get_favorite_service


router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.post(
    "",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a favorite",
    responses=get_error_responses(400, 401, 404, 409)
)
async def add_favorite(
    favorite_data: FavoriteCreate,
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteResponse:
    favorite = await favorite_service.add_favorite(favorite_data.property_id, current_user)
    return FavoriteResponse.model_validate(favorite)


@router.get(
    "",
    response_model=List[FavoriteResponse],
    summary="List favorites",
    responses=get_error_responses(401)
)
async def list_favorites(
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> List[FavoriteResponse]:
    favorites = await favorite_service.list_favorites(current_user)
    return [FavoriteResponse.model_validate(f) for f in favorites]


@router.delete(
    "/{favorite_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a favorite",
    responses=get_error_responses(401, 403, 404)
)
async def remove_favorite(
    favorite_id: int = Path(..., description="Favorite ID"),
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> Response:
    await favorite_service.remove_favorite(favorite_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
