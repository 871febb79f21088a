"""
Favorite repository for user bookmarks.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from homeverse.repositories.base import BaseRepository
from homeverse.models.favorite import Favorite
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class FavoriteRepository(BaseRepository[Favorite]):
    """Repository for (user, property) favorites."""

    def __init__(self, db: AsyncSession):
        super().__init__(Favorite, db)

    async def get_by_user_and_property(self, user_id: int, property_id: int) -> Optional[Favorite]:
        """
        Find the favorite linking a user to a property.

        Args:
            user_id: ID of the user
            property_id: ID of the property

        Returns:
            Favorite if the pair exists, None otherwise
        """
        query = select(Favorite).where(
            and_(Favorite.user_id == user_id, Favorite.property_id == property_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_user(self, user_id: int) -> List[Favorite]:
        favorites = await self.get_multi(filters={"user_id": user_id})
        logger.debug(f"Retrieved {len(favorites)} favorites for user {user_id}")
        return favorites
