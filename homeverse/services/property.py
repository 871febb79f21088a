"""
Property service for managing listings with ownership rules and image uploads.
Handles create/update/delete permissions, browse filters and the featured list.
"""

from typing import Optional, List
from fastapi import UploadFile
from homeverse.config import Settings
from homeverse.repositories.interface import StorageRepository, PropertyFilters
from homeverse.models.property import Property
from homeverse.models.user import User
from homeverse.schemas.property import PropertyCreate, PropertyUpdate
from homeverse.utils.file_utils import FileValidator, FileStorage
from homeverse.utils.exceptions import (
    PropertyNotFoundError,
    PropertyOwnershipError,
    InsufficientPermissionsError,
    ResourceLimitExceededError,
    BadRequestError,
)
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for listing CRUD.
    Only sellers, agents and admins may list; only the owner or an admin may change a listing.
    """

    def __init__(self, storage: StorageRepository, settings: Settings):
        self.storage = storage
        self.settings = settings
        self.file_validator = FileValidator(settings.allowed_file_types, settings.max_file_size)
        self.file_storage = FileStorage(settings.upload_dir)

    async def list_properties(self, filters: Optional[PropertyFilters] = None) -> List[Property]:
        properties = await self.storage.get_all_properties(filters)
        logger.debug(f"Listed {len(properties)} properties for {filters}")
        return properties

    async def get_featured_properties(self, limit: Optional[int] = None) -> List[Property]:
        return await self.storage.get_featured_properties(limit or self.settings.featured_default_limit)

    async def get_property(self, property_id: int) -> Property:
        """
        Get property by ID.

        Raises:
            PropertyNotFoundError: If property doesn't exist
        """
        property_obj = await self.storage.get_property(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(property_id)
        return property_obj

    async def get_user_properties(self, current_user: User) -> List[Property]:
        return await self.storage.get_properties_by_user(current_user.id)

    async def create_property(
        self,
        property_data: PropertyCreate,
        current_user: User,
        images: Optional[List[UploadFile]] = None
    ) -> Property:
        """
        Create a new listing owned by the current user.

        Args:
            property_data: Validated listing fields
            current_user: User creating the property
            images: Uploaded image files, stored in the given order

        Returns:
            Created property

        Raises:
            InsufficientPermissionsError: If the user's role may not list properties
            FileUploadError: If an image is rejected
        """
        if not current_user.can_list_properties:
            raise InsufficientPermissionsError("create properties")

        image_urls = await self._store_images(images or [], existing_count=0)

        create_data = property_data.model_dump()
        create_data["user_id"] = current_user.id
        create_data["images"] = image_urls

        try:
            property_obj = await self.storage.create_property(create_data)
        except ValueError as e:
            self._remove_files(image_urls)
            raise BadRequestError(str(e))
        except Exception:
            self._remove_files(image_urls)
            raise

        logger.info(
            f"Property created by user {current_user.username}: {property_obj.title} "
            f"(ID: {property_obj.id}, {len(image_urls)} images)"
        )
        return property_obj

    async def update_property(
        self,
        property_id: int,
        property_data: PropertyUpdate,
        current_user: User,
        images: Optional[List[UploadFile]] = None
    ) -> Property:
        """
        Partially update a listing. New images are appended to the existing ones.

        Args:
            property_id: ID of the property to update
            property_data: Fields to change
            current_user: User updating the property
            images: Additional uploaded image files

        Returns:
            Updated property

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If user is neither the owner nor an admin
        """
        existing_property = await self.get_property(property_id)

        if not current_user.can_manage_property(existing_property.user_id):
            raise PropertyOwnershipError("You don't have permission to update this property")

        current_images = list(existing_property.images or [])
        new_urls = await self._store_images(images or [], existing_count=len(current_images))

        update_data = property_data.model_dump(exclude_unset=True, exclude_none=True)
        if new_urls:
            update_data["images"] = current_images + new_urls

        try:
            updated_property = await self.storage.update_property(property_id, update_data)
        except Exception:
            self._remove_files(new_urls)
            raise

        if updated_property is None:
            self._remove_files(new_urls)
            raise PropertyNotFoundError(property_id)

        logger.info(f"Property updated by user {current_user.username}: {property_id} ({sorted(update_data)})")
        return updated_property

    async def delete_property(self, property_id: int, current_user: User) -> None:
        """
        Delete a listing along with its inquiries, favorites and image files.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If user is neither the owner nor an admin
        """
        existing_property = await self.get_property(property_id)

        if not current_user.can_manage_property(existing_property.user_id):
            raise PropertyOwnershipError("You don't have permission to delete this property")

        image_urls = list(existing_property.images or [])
        if not await self.storage.delete_property(property_id):
            raise PropertyNotFoundError(property_id)

        removed = self._remove_files(image_urls)
        logger.info(f"Property deleted by user {current_user.username}: {property_id} (with {removed} images)")

    def remove_property_files(self, properties: List[Property]) -> int:
        """Remove uploaded image files for properties that are about to disappear."""
        return sum(self._remove_files(list(p.images or [])) for p in properties)

    async def _store_images(self, images: List[UploadFile], existing_count: int) -> List[str]:
        """
        Validate every image first, then write them all.

        Returns:
            Public URLs of the stored files in upload order
        """
        images = [image for image in images if image.filename]
        if not images:
            return []

        if existing_count + len(images) > self.settings.max_images_per_property:
            raise ResourceLimitExceededError("Property images", self.settings.max_images_per_property)

        validated = [await self.file_validator.validate_upload_file(image) for image in images]

        urls = []
        try:
            for content, extension in validated:
                urls.append(await self.file_storage.save_file(content, extension))
        except Exception:
            self._remove_files(urls)
            raise
        return urls

    def _remove_files(self, urls: List[str]) -> int:
        return sum(1 for url in urls if self.file_storage.delete_file(url))
