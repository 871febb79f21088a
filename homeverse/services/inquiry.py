"""
Inquiry service for contact messages about listings.
"""

from typing import Optional, List
from homeverse.repositories.interface import StorageRepository
from homeverse.models.inquiry import Inquiry
from homeverse.models.user import User, UserRole
from homeverse.schemas.inquiry import InquiryCreate, InquiryUpdate
from homeverse.utils.exceptions import (
    NotFoundError,
    PropertyNotFoundError,
    InsufficientPermissionsError,
)
import logging

logger = logging.getLogger(__name__)


class InquiryService:
    """Creates inquiries from anyone and exposes them to agents and admins."""

    def __init__(self, storage: StorageRepository):
        self.storage = storage

    async def create_inquiry(self, inquiry_data: InquiryCreate, current_user: Optional[User] = None) -> Inquiry:
        """
        Record an inquiry. Logged-in submitters are linked to it.

        Args:
            inquiry_data: Validated contact form
            current_user: Submitter, if logged in

        Returns:
            Created inquiry with status pending

        Raises:
            PropertyNotFoundError: If the referenced property doesn't exist
        """
        if inquiry_data.property_id is not None:
            if await self.storage.get_property(inquiry_data.property_id) is None:
                raise PropertyNotFoundError(inquiry_data.property_id)

        create_data = inquiry_data.model_dump()
        create_data["user_id"] = current_user.id if current_user else None

        inquiry = await self.storage.create_inquiry(create_data)
        logger.info(f"Inquiry {inquiry.id} received for property {inquiry.property_id}")
        return inquiry

    async def list_inquiries(
        self,
        current_user: User,
        property_id: Optional[int] = None,
        user_id: Optional[int] = None
    ) -> List[Inquiry]:
        """
        List inquiries by property, by user (admins only) or for the caller.

        Args:
            current_user: Agent or admin making the request
            property_id: Restrict to one property
            user_id: Restrict to one submitter; ignored for non-admins

        Returns:
            Matching inquiries in id order
        """
        if property_id is not None:
            return await self.storage.get_inquiries_by_property(property_id)

        if user_id is not None and current_user.role == UserRole.ADMIN:
            return await self.storage.get_inquiries_by_user(user_id)

        return await self.storage.get_inquiries_by_user(current_user.id)

    async def get_inquiry(self, inquiry_id: int) -> Inquiry:
        inquiry = await self.storage.get_inquiry(inquiry_id)
        if inquiry is None:
            raise NotFoundError("Inquiry", inquiry_id)
        return inquiry

    async def update_inquiry(self, inquiry_id: int, update_data: InquiryUpdate, current_user: User) -> Inquiry:
        await self.get_inquiry(inquiry_id)

        inquiry = await self.storage.update_inquiry(inquiry_id, update_data.model_dump())
        if inquiry is None:
            raise NotFoundError("Inquiry", inquiry_id)

        logger.info(f"Inquiry {inquiry_id} set to {inquiry.status.value} by user {current_user.id}")
        return inquiry

    async def delete_inquiry(self, inquiry_id: int, current_user: User) -> None:
        if current_user.role not in (UserRole.ADMIN, UserRole.AGENT):
            raise InsufficientPermissionsError("delete inquiries")

        if not await self.storage.delete_inquiry(inquiry_id):
            raise NotFoundError("Inquiry", inquiry_id)
        logger.info(f"Inquiry {inquiry_id} deleted by user {current_user.id}")
