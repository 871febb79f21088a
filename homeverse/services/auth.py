"""
Authentication service for registration, login and server-side sessions.
Sessions are opaque random tokens stored through the storage repository.
"""

from typing import Optional, Tuple
from datetime import timedelta
from homeverse.config import Settings
from homeverse.database import utc_now
from homeverse.repositories.interface import StorageRepository
from homeverse.models.user import User
from homeverse.schemas.user import RegisterRequest, UserUpdate
from homeverse.utils.exceptions import (
    InvalidCredentialsError,
    DuplicateResourceError,
    ValidationError,
)
import secrets
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and login sessions.
    Password hashing is delegated to the User model's passlib context.
    """

    def __init__(self, storage: StorageRepository, settings: Settings):
        self.storage = storage
        self.settings = settings

    async def register(self, user_data: RegisterRequest) -> User:
        """
        Create a new account.

        Args:
            user_data: Validated registration payload

        Returns:
            Created user

        Raises:
            DuplicateResourceError: If the username or email is taken
            ValidationError: If the password is rejected
        """
        if await self.storage.get_user_by_username(user_data.username):
            raise DuplicateResourceError("User", user_data.username)
        if await self.storage.get_user_by_email(user_data.email):
            raise DuplicateResourceError("User", user_data.email)

        try:
            hashed_password = User.hash_password(user_data.password)
        except ValueError as e:
            raise ValidationError(str(e))

        create_data = user_data.model_dump(exclude={"password"})
        create_data["hashed_password"] = hashed_password

        user = await self.storage.create_user(create_data)
        logger.info(f"User registered: {user.username} (ID: {user.id}, role: {user.role.value})")
        return user

    async def authenticate_user(self, identifier: str, password: str) -> User:
        """
        Check credentials. The identifier may be a username or an email.

        Args:
            identifier: Username or email address
            password: Plain text password

        Returns:
            Authenticated user

        Raises:
            InvalidCredentialsError: If no user matches or the password is wrong
        """
        identifier = identifier.strip()
        user = await self.storage.get_user_by_username(identifier)
        if user is None and "@" in identifier:
            user = await self.storage.get_user_by_email(identifier)

        if user is None or not user.verify_password(password):
            logger.warning(f"Failed login attempt for: {identifier}")
            raise InvalidCredentialsError()

        return user

    async def start_session(self, user: User) -> str:
        """
        Open a login session for a user, purging expired sessions first.

        Args:
            user: Authenticated user

        Returns:
            Session token to send as the cookie value
        """
        now = utc_now()
        await self.storage.delete_expired_sessions(now)

        token = secrets.token_urlsafe(32)
        expires_at = now + timedelta(seconds=self.settings.session_max_age_seconds)
        await self.storage.create_session(user.id, token, expires_at)

        logger.info(f"Session started for user {user.id}")
        return token

    async def login(self, identifier: str, password: str) -> Tuple[User, str]:
        """
        Authenticate and open a session.

        Returns:
            Tuple of (user, session token)
        """
        user = await self.authenticate_user(identifier, password)
        token = await self.start_session(user)
        return user, token

    async def logout(self, token: Optional[str]) -> None:
        if token and await self.storage.delete_session(token):
            logger.info("Session ended")

    async def get_user_for_session(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve a session token to its user.

        Args:
            token: Cookie value, possibly missing

        Returns:
            The session's user, or None for missing, unknown or expired sessions
        """
        if not token:
            return None

        session = await self.storage.get_session(token)
        if session is None:
            return None

        if session.is_expired(utc_now()):
            await self.storage.delete_session(token)
            logger.debug(f"Expired session rejected for user {session.user_id}")
            return None

        return await self.storage.get_user(session.user_id)

    async def update_profile(self, user: User, update_data: UserUpdate) -> User:
        """
        Update the caller's own profile.

        Args:
            user: Current user
            update_data: Fields to change

        Returns:
            Updated user

        Raises:
            DuplicateResourceError: If the new email belongs to another account
        """
        changes = update_data.model_dump(exclude_unset=True)

        if changes.get("email"):
            existing = await self.storage.get_user_by_email(changes["email"])
            if existing is not None and existing.id != user.id:
                raise DuplicateResourceError("User", changes["email"])
        elif "email" in changes:
            # Email is required on the account
            changes.pop("email")

        password = changes.pop("password", None)
        if password:
            try:
                changes["hashed_password"] = User.hash_password(password)
            except ValueError as e:
                raise ValidationError(str(e))

        updated_user = await self.storage.update_user(user.id, changes)
        logger.info(f"Profile updated for user {user.id}: {sorted(changes)}")
        return updated_user
