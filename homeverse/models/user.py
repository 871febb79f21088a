"""
User model with authentication and role management.
Handles accounts for buyers, sellers, agents and administrators.
"""

from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from homeverse.database import Base
from passlib.context import CryptContext
import enum
from typing import Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    BUYER = "buyer"
    SELLER = "seller"
    AGENT = "agent"
    ADMIN = "admin"


# Roles allowed to publish listings
LISTING_ROLES = (UserRole.SELLER, UserRole.AGENT, UserRole.ADMIN)


class User(Base):
    """
    User model for authentication and authorization.
    Owns zero or more properties, inquiries, favorites and sessions.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="Login name - must be unique"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            native_enum=False,
            length=20,
            values_callable=lambda roles: [role.value for role in roles]
        ),
        nullable=False,
        default=UserRole.BUYER,
        index=True,
        comment="User role for access control"
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        if not password or len(password) < 6:
            raise ValueError("Password must be at least 6 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """
        Verify a password against the stored hash.

        Args:
            password: Plain text password to verify

        Returns:
            True if password matches, False otherwise
        """
        return pwd_context.verify(password, self.hashed_password)

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    @property
    def can_list_properties(self) -> bool:
        """Check if user may publish listings."""
        return self.role in LISTING_ROLES

    def can_manage_property(self, property_owner_id: int) -> bool:
        """
        Check if user can manage a specific property.

        Args:
            property_owner_id: ID of the property's owner

        Returns:
            True if user can manage the property, False otherwise
        """
        # Admins can manage all properties
        if self.is_admin:
            return True

        return self.id == property_owner_id
