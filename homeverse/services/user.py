"""
User administration service.
"""

from typing import List
from homeverse.repositories.interface import StorageRepository
from homeverse.models.user import User
from homeverse.services.property import PropertyService
from homeverse.utils.exceptions import NotFoundError, ForbiddenError
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Admin-only account listing and removal."""

    def __init__(self, storage: StorageRepository, property_service: PropertyService):
        self.storage = storage
        self.property_service = property_service

    async def list_users(self) -> List[User]:
        return await self.storage.get_all_users()

    async def delete_user(self, user_id: int, current_user: User) -> None:
        """
        Delete an account and everything that hangs off it.

        Args:
            user_id: Account to delete
            current_user: Admin performing the deletion

        Raises:
            ForbiddenError: If admins try to delete their own account
            NotFoundError: If the user doesn't exist
        """
        if user_id == current_user.id:
            raise ForbiddenError("Administrators cannot delete their own account")

        if await self.storage.get_user(user_id) is None:
            raise NotFoundError("User", user_id)

        properties = await self.storage.get_properties_by_user(user_id)
        await self.storage.delete_user(user_id)
        removed = self.property_service.remove_property_files(properties)

        logger.info(
            f"User {user_id} deleted by admin {current_user.id} "
            f"({len(properties)} properties, {removed} image files)"
        )
