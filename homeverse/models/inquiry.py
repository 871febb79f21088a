"""
Inquiry model for contact messages about listings.
"""

from sqlalchemy import String, Text, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from homeverse.database import Base
import enum
from typing import Optional


class InquiryStatus(str, enum.Enum):
    """Handling state of an inquiry."""
    PENDING = "pending"
    RESPONDED = "responded"
    CLOSED = "closed"


class Inquiry(Base):
    """
    Contact message optionally tied to a property and/or a registered user.
    """

    __tablename__ = "inquiries"

    # Submitter contact info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    property_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="Set when the submitter was logged in"
    )

    status: Mapped[InquiryStatus] = mapped_column(
        SQLEnum(
            InquiryStatus,
            native_enum=False,
            length=20,
            values_callable=lambda members: [member.value for member in members]
        ),
        nullable=False,
        default=InquiryStatus.PENDING,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Inquiry(id={self.id}, property_id={self.property_id}, status={self.status})>"
