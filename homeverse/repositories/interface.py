"""
Storage interface shared by the database-backed and in-memory implementations.
Route handlers and services depend only on this contract.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from homeverse.models.favorite import Favorite
from homeverse.models.inquiry import Inquiry
from homeverse.models.property import Property, PropertyStatus, PropertyType
from homeverse.models.session import UserSession
from homeverse.models.user import User


class PropertyFilters:
    """Data class for property listing filters. Unset filters are no-ops."""

    def __init__(
        self,
        location: Optional[str] = None,
        property_type: Optional[PropertyType] = None,
        status: Optional[PropertyStatus] = None,
        price_min: Optional[int] = None,
        price_max: Optional[int] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[int] = None,
        area_min: Optional[int] = None,
        area_max: Optional[int] = None
    ):
        self.location = location
        self.property_type = property_type
        self.status = status
        self.price_min = price_min
        self.price_max = price_max
        self.bedrooms = bedrooms
        self.bathrooms = bathrooms
        self.area_min = area_min
        self.area_max = area_max

    def matches(self, property_obj: Property) -> bool:
        """
        Evaluate the filters against a single record.

        Args:
            property_obj: Property to test

        Returns:
            True if every set filter accepts the property
        """
        if self.location:
            term = self.location.lower()
            if term not in property_obj.city.lower() and term not in property_obj.state.lower():
                return False
        if self.property_type is not None and property_obj.property_type != self.property_type:
            return False
        if self.status is not None and property_obj.status != self.status:
            return False
        if self.price_min is not None and property_obj.price < self.price_min:
            return False
        if self.price_max is not None and property_obj.price > self.price_max:
            return False
        if self.bedrooms is not None and property_obj.bedrooms < self.bedrooms:
            return False
        if self.bathrooms is not None and property_obj.bathrooms < self.bathrooms:
            return False
        if self.area_min is not None and property_obj.area < self.area_min:
            return False
        if self.area_max is not None and property_obj.area > self.area_max:
            return False
        return True

    def __repr__(self) -> str:
        active = {k: v for k, v in vars(self).items() if v is not None}
        return f"PropertyFilters({active})"


class StorageRepository(ABC):
    """
    CRUD and filtered listing over users, properties, inquiries, favorites
    and login sessions. Lookups return None when a record is absent;
    deletes report whether a record was removed.
    """

    # User methods
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def create_user(self, user_data: Dict[str, Any]) -> User: ...

    @abstractmethod
    async def update_user(self, user_id: int, user_data: Dict[str, Any]) -> Optional[User]: ...

    @abstractmethod
    async def delete_user(self, user_id: int) -> bool: ...

    @abstractmethod
    async def get_all_users(self) -> List[User]: ...

    # Property methods
    @abstractmethod
    async def get_property(self, property_id: int) -> Optional[Property]: ...

    @abstractmethod
    async def create_property(self, property_data: Dict[str, Any]) -> Property: ...

    @abstractmethod
    async def update_property(self, property_id: int, property_data: Dict[str, Any]) -> Optional[Property]: ...

    @abstractmethod
    async def delete_property(self, property_id: int) -> bool: ...

    @abstractmethod
    async def get_all_properties(self, filters: Optional[PropertyFilters] = None) -> List[Property]: ...

    @abstractmethod
    async def get_properties_by_user(self, user_id: int) -> List[Property]: ...

    @abstractmethod
    async def get_featured_properties(self, limit: int = 6) -> List[Property]: ...

    # Inquiry methods
    @abstractmethod
    async def get_inquiry(self, inquiry_id: int) -> Optional[Inquiry]: ...

    @abstractmethod
    async def create_inquiry(self, inquiry_data: Dict[str, Any]) -> Inquiry: ...

    @abstractmethod
    async def update_inquiry(self, inquiry_id: int, inquiry_data: Dict[str, Any]) -> Optional[Inquiry]: ...

    @abstractmethod
    async def delete_inquiry(self, inquiry_id: int) -> bool: ...

    @abstractmethod
    async def get_inquiries_by_property(self, property_id: int) -> List[Inquiry]: ...

    @abstractmethod
    async def get_inquiries_by_user(self, user_id: int) -> List[Inquiry]: ...

    # Favorite methods
    @abstractmethod
    async def get_favorite(self, favorite_id: int) -> Optional[Favorite]: ...

    @abstractmethod
    async def get_favorite_by_user_and_property(self, user_id: int, property_id: int) -> Optional[Favorite]: ...

    @abstractmethod
    async def create_favorite(self, favorite_data: Dict[str, Any]) -> Favorite: ...

    @abstractmethod
    async def delete_favorite(self, favorite_id: int) -> bool: ...

    @abstractmethod
    async def get_favorites_by_user(self, user_id: int) -> List[Favorite]: ...

    # Session methods
    @abstractmethod
    async def create_session(self, user_id: int, token: str, expires_at: datetime) -> UserSession: ...

    @abstractmethod
    async def get_session(self, token: str) -> Optional[UserSession]: ...

    @abstractmethod
    async def delete_session(self, token: str) -> bool: ...

    @abstractmethod
    async def delete_expired_sessions(self, now: datetime) -> int: ...

    @abstractmethod
    async def ping(self) -> bool:
        """Report whether the underlying store is reachable."""
