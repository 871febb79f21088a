"""
User repository for authentication lookups and account management.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from homeverse.repositories.base import BaseRepository
from homeverse.models.user import User
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Usernames match exactly; emails are compared case-insensitively.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user. The password must already be hashed.

        Args:
            user_data: Dictionary containing user fields including hashed_password

        Returns:
            Created user instance
        """
        create_data = {**user_data, "email": user_data["email"].lower().strip()}
        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.username} (ID: {created_user.id})")
        return created_user

    async def get_by_username(self, username: str) -> Optional[User]:
        """
        Get user by username.

        Args:
            username: Username to search for

        Returns:
            User instance if found, None otherwise
        """
        return await self.get_by_field("username", username.strip())

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            query = select(User).where(func.lower(User.email) == normalized_email)
            result = await self.db.execute(query)
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {email}")
            else:
                logger.debug(f"User with email {email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def get_all(self) -> List[User]:
        """Get every user in id order."""
        return await self.get_multi()
