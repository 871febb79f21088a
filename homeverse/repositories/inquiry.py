"""
Inquiry repository for contact messages.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from homeverse.repositories.base import BaseRepository
from homeverse.models.inquiry import Inquiry, InquiryStatus
from typing import List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class InquiryRepository(BaseRepository[Inquiry]):
    """Repository for inquiries scoped by property or submitting user."""

    def __init__(self, db: AsyncSession):
        super().__init__(Inquiry, db)

    async def create_inquiry(self, inquiry_data: Dict[str, Any]) -> Inquiry:
        """
        Create an inquiry. New inquiries always start as pending.

        Args:
            inquiry_data: Contact details, message and optional references

        Returns:
            Created inquiry
        """
        inquiry = await self.create({**inquiry_data, "status": InquiryStatus.PENDING})
        logger.info(f"Created inquiry {inquiry.id} for property {inquiry.property_id}")
        return inquiry

    async def get_by_property(self, property_id: int) -> List[Inquiry]:
        return await self.get_multi(filters={"property_id": property_id})

    async def get_by_user(self, user_id: int) -> List[Inquiry]:
        return await self.get_multi(filters={"user_id": user_id})
