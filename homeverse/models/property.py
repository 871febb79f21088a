"""
Property model for sale and rental listings.
Handles listing data with address, pricing, media and ownership.
"""

from sqlalchemy import String, Text, Integer, JSON, DateTime, ForeignKey, Index, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column
from homeverse.database import Base, utc_now
from datetime import datetime
import enum
from typing import List, Optional


class PropertyType(str, enum.Enum):
    """Kind of dwelling being listed."""
    HOUSE = "house"
    APARTMENT = "apartment"
    CONDO = "condo"
    VILLA = "villa"


class PropertyStatus(str, enum.Enum):
    """Market status of a listing."""
    FOR_SALE = "for_sale"
    FOR_RENT = "for_rent"
    SOLD = "sold"
    RENTED = "rented"


def _enum_column(enum_cls):
    return SQLEnum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [member.value for member in members]
    )


class Property(Base):
    """
    Property model for managing listings.
    Images and features are stored as JSON arrays.
    """

    __tablename__ = "properties"

    # Basic property information
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Asking price or rent in whole currency units"
    )

    # Address
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)

    property_type: Mapped[PropertyType] = mapped_column(
        _enum_column(PropertyType),
        nullable=False,
        index=True
    )

    status: Mapped[PropertyStatus] = mapped_column(
        _enum_column(PropertyStatus),
        nullable=False,
        default=PropertyStatus.FOR_SALE,
        index=True
    )

    # Property specifications
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    area: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Property area in square feet"
    )
    year_built: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    images: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered list of image URL paths"
    )

    features: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Free-text feature tags such as garage or pool"
    )

    # Owner (seller or agent)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"


# Composite index for the browse page filters
search_index = Index(
    "idx_properties_type_status_price",
    Property.property_type,
    Property.status,
    Property.price
)
