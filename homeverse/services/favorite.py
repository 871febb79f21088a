"""
Favorite service for per-user property bookmarks.
"""

from typing import List
from homeverse.repositories.interface import StorageRepository
from homeverse.models.favorite import Favorite
from homeverse.models.user import User
from homeverse.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    PropertyNotFoundError,
    DuplicateResourceError,
)
import logging

logger = logging.getLogger(__name__)


class FavoriteService:
    """Adds, lists and removes the caller's favorites."""

    def __init__(self, storage: StorageRepository):
        self.storage = storage

    async def add_favorite(self, property_id: int, current_user: User) -> Favorite:
        """
        Bookmark a property for the current user.

        Args:
            property_id: Property to bookmark
            current_user: Owner of the favorite

        Returns:
            Created favorite

        Raises:
            PropertyNotFoundError: If the property doesn't exist
            DuplicateResourceError: If the property is already a favorite
        """
        if await self.storage.get_property(property_id) is None:
            raise PropertyNotFoundError(property_id)

        if await self.storage.get_favorite_by_user_and_property(current_user.id, property_id):
            raise DuplicateResourceError("Favorite", str(property_id))

        favorite = await self.storage.create_favorite({
            "user_id": current_user.id,
            "property_id": property_id,
        })
        logger.info(f"User {current_user.id} favorited property {property_id}")
        return favorite

    async def list_favorites(self, current_user: User) -> List[Favorite]:
        return await self.storage.get_favorites_by_user(current_user.id)

    async def remove_favorite(self, favorite_id: int, current_user: User) -> None:
        """
        Remove one of the caller's favorites.

        Raises:
            NotFoundError: If the favorite doesn't exist
            ForbiddenError: If it belongs to another user
        """
        favorite = await self.storage.get_favorite(favorite_id)
        if favorite is None:
            raise NotFoundError("Favorite", favorite_id)

        if favorite.user_id != current_user.id:
            raise ForbiddenError("Unauthorized to remove this favorite")

        await self.storage.delete_favorite(favorite_id)
        logger.info(f"User {current_user.id} removed favorite {favorite_id}")
