"""
In-process storage for development and tests.
Records are plain model instances that are never attached to a database session.
"""

from homeverse.repositories.interface import StorageRepository, PropertyFilters
from homeverse.models import (
    User, UserRole, Property, PropertyStatus, Inquiry, InquiryStatus, Favorite, UserSession
)
from homeverse.database import utc_now
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class MemoryState:
    """
    Maps and id counters shared by every MemoryStorage built on it.
    Create one per application (or per test) and pass it in explicitly.
    """

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.properties: Dict[int, Property] = {}
        self.inquiries: Dict[int, Inquiry] = {}
        self.favorites: Dict[int, Favorite] = {}
        self.sessions: Dict[str, UserSession] = {}
        self._counters: Dict[str, int] = {}

    def next_id(self, kind: str) -> int:
        self._counters[kind] = self._counters.get(kind, 0) + 1
        return self._counters[kind]

    def clear(self) -> None:
        self.__init__()


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class MemoryStorage(StorageRepository):
    """
    StorageRepository over a MemoryState.
    Mirrors the database cascades and the owner-exists check. No locking.
    """

    def __init__(self, state: MemoryState):
        self.state = state

    @staticmethod
    def _apply(obj, data: Dict[str, Any]) -> None:
        for field, value in data.items():
            if field in ("id", "created_at") or not hasattr(type(obj), field):
                continue
            setattr(obj, field, value)

    # User methods
    async def get_user(self, user_id: int) -> Optional[User]:
        return self.state.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        username = username.strip()
        for user in self.state.users.values():
            if user.username == username:
                return user
        return None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.lower().strip()
        for user in self.state.users.values():
            if user.email.lower() == email:
                return user
        return None

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Store a new user. The password must already be hashed.

        Raises:
            ValueError: If the username or email is already taken
        """
        email = user_data["email"].lower().strip()
        if await self.get_user_by_username(user_data["username"]) is not None:
            raise ValueError(f"Username {user_data['username']} already exists")
        if await self.get_user_by_email(email) is not None:
            raise ValueError(f"Email {email} already exists")

        user = User(**{"role": UserRole.BUYER, **user_data, "email": email})
        user.id = self.state.next_id("users")
        user.created_at = utc_now()
        self.state.users[user.id] = user
        logger.info(f"Created user: {user.username} (ID: {user.id})")
        return user

    async def update_user(self, user_id: int, user_data: Dict[str, Any]) -> Optional[User]:
        user = self.state.users.get(user_id)
        if user is None:
            return None
        if user_data.get("email"):
            user_data = {**user_data, "email": user_data["email"].lower().strip()}
        self._apply(user, user_data)
        return user

    async def delete_user(self, user_id: int) -> bool:
        user = self.state.users.pop(user_id, None)
        if user is None:
            return False

        for property_id in [p.id for p in self.state.properties.values() if p.user_id == user_id]:
            await self.delete_property(property_id)
        self._drop(self.state.inquiries, lambda i: i.user_id == user_id)
        self._drop(self.state.favorites, lambda f: f.user_id == user_id)
        self._drop(self.state.sessions, lambda s: s.user_id == user_id)

        logger.info(f"Deleted user {user_id} and dependent records")
        return True

    async def get_all_users(self) -> List[User]:
        return [self.state.users[key] for key in sorted(self.state.users)]

    # Property methods
    async def get_property(self, property_id: int) -> Optional[Property]:
        return self.state.properties.get(property_id)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Store a new property.

        Raises:
            ValueError: If the owning user does not exist
        """
        owner_id = property_data.get("user_id")
        if owner_id not in self.state.users:
            raise ValueError(f"Owner user {owner_id} does not exist")

        now = utc_now()
        property_obj = Property(**{
            "status": PropertyStatus.FOR_SALE,
            "year_built": None,
            **property_data,
        })
        property_obj.images = list(property_data.get("images") or [])
        property_obj.features = list(property_data.get("features") or [])
        property_obj.id = self.state.next_id("properties")
        property_obj.created_at = now
        property_obj.updated_at = now
        self.state.properties[property_obj.id] = property_obj
        logger.info(f"Created property: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def update_property(self, property_id: int, property_data: Dict[str, Any]) -> Optional[Property]:
        property_obj = self.state.properties.get(property_id)
        if property_obj is None:
            return None
        self._apply(property_obj, property_data)
        property_obj.updated_at = utc_now()
        return property_obj

    async def delete_property(self, property_id: int) -> bool:
        if self.state.properties.pop(property_id, None) is None:
            return False
        self._drop(self.state.inquiries, lambda i: i.property_id == property_id)
        self._drop(self.state.favorites, lambda f: f.property_id == property_id)
        return True

    async def get_all_properties(self, filters: Optional[PropertyFilters] = None) -> List[Property]:
        properties = [self.state.properties[key] for key in sorted(self.state.properties)]
        if filters is None:
            return properties
        return [p for p in properties if filters.matches(p)]

    async def get_properties_by_user(self, user_id: int) -> List[Property]:
        return [p for p in await self.get_all_properties() if p.user_id == user_id]

    async def get_featured_properties(self, limit: int = 6) -> List[Property]:
        properties = sorted(
            self.state.properties.values(),
            key=lambda p: (p.created_at, p.id),
            reverse=True
        )
        return properties[:limit]

    # Inquiry methods
    async def get_inquiry(self, inquiry_id: int) -> Optional[Inquiry]:
        return self.state.inquiries.get(inquiry_id)

    async def create_inquiry(self, inquiry_data: Dict[str, Any]) -> Inquiry:
        inquiry = Inquiry(**{
            "phone": None,
            "property_id": None,
            "user_id": None,
            **inquiry_data,
            "status": InquiryStatus.PENDING,
        })
        inquiry.id = self.state.next_id("inquiries")
        inquiry.created_at = utc_now()
        self.state.inquiries[inquiry.id] = inquiry
        logger.info(f"Created inquiry {inquiry.id} for property {inquiry.property_id}")
        return inquiry

    async def update_inquiry(self, inquiry_id: int, inquiry_data: Dict[str, Any]) -> Optional[Inquiry]:
        inquiry = self.state.inquiries.get(inquiry_id)
        if inquiry is None:
            return None
        self._apply(inquiry, inquiry_data)
        return inquiry

    async def delete_inquiry(self, inquiry_id: int) -> bool:
        return self.state.inquiries.pop(inquiry_id, None) is not None

    async def get_inquiries_by_property(self, property_id: int) -> List[Inquiry]:
        return self._sorted(i for i in self.state.inquiries.values() if i.property_id == property_id)

    async def get_inquiries_by_user(self, user_id: int) -> List[Inquiry]:
        return self._sorted(i for i in self.state.inquiries.values() if i.user_id == user_id)

    # Favorite methods
    async def get_favorite(self, favorite_id: int) -> Optional[Favorite]:
        return self.state.favorites.get(favorite_id)

    async def get_favorite_by_user_and_property(self, user_id: int, property_id: int) -> Optional[Favorite]:
        for favorite in self.state.favorites.values():
            if favorite.user_id == user_id and favorite.property_id == property_id:
                return favorite
        return None

    async def create_favorite(self, favorite_data: Dict[str, Any]) -> Favorite:
        """
        Store a new favorite.

        Raises:
            ValueError: If the pair already exists or either side is missing
        """
        user_id = favorite_data.get("user_id")
        property_id = favorite_data.get("property_id")
        if user_id not in self.state.users or property_id not in self.state.properties:
            raise ValueError(f"User {user_id} or property {property_id} does not exist")
        if await self.get_favorite_by_user_and_property(user_id, property_id) is not None:
            raise ValueError(f"Property {property_id} is already a favorite of user {user_id}")

        favorite = Favorite(user_id=user_id, property_id=property_id)
        favorite.id = self.state.next_id("favorites")
        favorite.created_at = utc_now()
        self.state.favorites[favorite.id] = favorite
        return favorite

    async def delete_favorite(self, favorite_id: int) -> bool:
        return self.state.favorites.pop(favorite_id, None) is not None

    async def get_favorites_by_user(self, user_id: int) -> List[Favorite]:
        return self._sorted(f for f in self.state.favorites.values() if f.user_id == user_id)

    # Session methods
    async def create_session(self, user_id: int, token: str, expires_at: datetime) -> UserSession:
        if user_id not in self.state.users:
            raise ValueError(f"User {user_id} does not exist")
        if token in self.state.sessions:
            raise ValueError("Session token already exists")

        session = UserSession(user_id=user_id, token=token, expires_at=expires_at)
        session.id = self.state.next_id("sessions")
        session.created_at = utc_now()
        self.state.sessions[token] = session
        return session

    async def get_session(self, token: str) -> Optional[UserSession]:
        return self.state.sessions.get(token)

    async def delete_session(self, token: str) -> bool:
        return self.state.sessions.pop(token, None) is not None

    async def delete_expired_sessions(self, now: datetime) -> int:
        removed = self._drop(self.state.sessions, lambda s: _aware(s.expires_at) <= _aware(now))
        if removed:
            logger.info(f"Purged {removed} expired sessions")
        return removed

    async def ping(self) -> bool:
        return True

    @staticmethod
    def _drop(records: Dict[Any, Any], predicate) -> int:
        doomed = [key for key, record in records.items() if predicate(record)]
        for key in doomed:
            del records[key]
        return len(doomed)

    @staticmethod
    def _sorted(records) -> list:
        return sorted(records, key=lambda record: record.id)
