"""
Durable storage backed by SQLAlchemy.
Composes the per-entity repositories over one request-scoped AsyncSession.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from homeverse.repositories.interface import StorageRepository, PropertyFilters
from homeverse.repositories.user import UserRepository
from homeverse.repositories.property import PropertyRepository
from homeverse.repositories.inquiry import InquiryRepository
from homeverse.repositories.favorite import FavoriteRepository
from homeverse.repositories.session import SessionRepository
from homeverse.models import User, Property, Inquiry, Favorite, UserSession
from datetime import datetime
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class DatabaseStorage(StorageRepository):
    """StorageRepository implementation over a relational database."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.properties = PropertyRepository(db)
        self.inquiries = InquiryRepository(db)
        self.favorites = FavoriteRepository(db)
        self.sessions = SessionRepository(db)

    # User methods
    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.users.get_by_id(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self.users.get_by_username(username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.users.get_by_email(email)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        return await self.users.create_user(user_data)

    async def update_user(self, user_id: int, user_data: Dict[str, Any]) -> Optional[User]:
        if "email" in user_data and user_data["email"]:
            user_data = {**user_data, "email": user_data["email"].lower().strip()}
        return await self.users.update(user_id, user_data)

    async def delete_user(self, user_id: int) -> bool:
        return await self.users.delete(user_id)

    async def get_all_users(self) -> List[User]:
        return await self.users.get_all()

    # Property methods
    async def get_property(self, property_id: int) -> Optional[Property]:
        return await self.properties.get_by_id(property_id)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        return await self.properties.create_property(property_data)

    async def update_property(self, property_id: int, property_data: Dict[str, Any]) -> Optional[Property]:
        return await self.properties.update_property(property_id, property_data)

    async def delete_property(self, property_id: int) -> bool:
        return await self.properties.delete(property_id)

    async def get_all_properties(self, filters: Optional[PropertyFilters] = None) -> List[Property]:
        return await self.properties.search_properties(filters)

    async def get_properties_by_user(self, user_id: int) -> List[Property]:
        return await self.properties.get_properties_by_user(user_id)

    async def get_featured_properties(self, limit: int = 6) -> List[Property]:
        return await self.properties.get_featured_properties(limit)

    # Inquiry methods
    async def get_inquiry(self, inquiry_id: int) -> Optional[Inquiry]:
        return await self.inquiries.get_by_id(inquiry_id)

    async def create_inquiry(self, inquiry_data: Dict[str, Any]) -> Inquiry:
        return await self.inquiries.create_inquiry(inquiry_data)

    async def update_inquiry(self, inquiry_id: int, inquiry_data: Dict[str, Any]) -> Optional[Inquiry]:
        return await self.inquiries.update(inquiry_id, inquiry_data)

    async def delete_inquiry(self, inquiry_id: int) -> bool:
        return await self.inquiries.delete(inquiry_id)

    async def get_inquiries_by_property(self, property_id: int) -> List[Inquiry]:
        return await self.inquiries.get_by_property(property_id)

    async def get_inquiries_by_user(self, user_id: int) -> List[Inquiry]:
        return await self.inquiries.get_by_user(user_id)

    # Favorite methods
    async def get_favorite(self, favorite_id: int) -> Optional[Favorite]:
        return await self.favorites.get_by_id(favorite_id)

    async def get_favorite_by_user_and_property(self, user_id: int, property_id: int) -> Optional[Favorite]:
        return await self.favorites.get_by_user_and_property(user_id, property_id)

    async def create_favorite(self, favorite_data: Dict[str, Any]) -> Favorite:
        return await self.favorites.create(favorite_data)

    async def delete_favorite(self, favorite_id: int) -> bool:
        return await self.favorites.delete(favorite_id)

    async def get_favorites_by_user(self, user_id: int) -> List[Favorite]:
        return await self.favorites.get_by_user(user_id)

    # Session methods
    async def create_session(self, user_id: int, token: str, expires_at: datetime) -> UserSession:
        return await self.sessions.create({"user_id": user_id, "token": token, "expires_at": expires_at})

    async def get_session(self, token: str) -> Optional[UserSession]:
        return await self.sessions.get_by_token(token)

    async def delete_session(self, token: str) -> bool:
        return await self.sessions.delete_by_token(token)

    async def delete_expired_sessions(self, now: datetime) -> int:
        return await self.sessions.delete_expired(now)

    async def ping(self) -> bool:
        try:
            result = await self.db.execute(text("SELECT 1"))
            result.scalar()
            return True
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False
