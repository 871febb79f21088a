"""
Session repository backing cookie-based logins.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from homeverse.repositories.base import BaseRepository
from homeverse.models.session import UserSession
from datetime import datetime
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[UserSession]):
    """Repository for server-side login sessions keyed by token."""

    def __init__(self, db: AsyncSession):
        super().__init__(UserSession, db)

    async def get_by_token(self, token: str) -> Optional[UserSession]:
        return await self.get_by_field("token", token)

    async def delete_by_token(self, token: str) -> bool:
        """
        Delete the session with the given token.

        Args:
            token: Session cookie value

        Returns:
            True if a session was removed
        """
        try:
            result = await self.db.execute(delete(UserSession).where(UserSession.token == token))
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete session: {e}")
            raise

    async def delete_expired(self, now: datetime) -> int:
        """
        Remove sessions whose expiry has passed.

        Args:
            now: Reference time

        Returns:
            Number of sessions removed
        """
        try:
            result = await self.db.execute(delete(UserSession).where(UserSession.expires_at <= now))
            await self.db.commit()
            if result.rowcount:
                logger.info(f"Purged {result.rowcount} expired sessions")
            return result.rowcount
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to purge expired sessions: {e}")
            raise
