"""
Pydantic schemas for property requests and responses.
Handles listing create/update payloads coming from multipart forms.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Any
from datetime import datetime
import json
from homeverse.models.property import PropertyType, PropertyStatus


def parse_features(v: Any) -> Any:
    """
    Accept features as a list, a JSON array string or a comma-separated string.

    Args:
        v: Raw form or JSON value

    Returns:
        List of trimmed, non-empty feature strings (or v unchanged for pydantic to reject)
    """
    if v is None:
        return v
    if isinstance(v, str):
        text = v.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                v = json.loads(text)
            except json.JSONDecodeError:
                raise ValueError("Features must be a JSON array or a comma-separated list")
        else:
            v = text.split(",")
    if isinstance(v, list):
        return [str(item).strip() for item in v if str(item).strip()]
    return v


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property listing title",
        examples=["Modern Family House"]
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Detailed property description"
    )
    price: int = Field(
        ...,
        gt=0,
        description="Price in whole currency units",
        examples=[350000]
    )
    address: str = Field(..., min_length=1, max_length=255, examples=["123 Main St"])
    city: str = Field(..., min_length=1, max_length=100, examples=["Austin"])
    state: str = Field(..., min_length=1, max_length=100, examples=["TX"])
    zip_code: str = Field(..., min_length=1, max_length=20, examples=["78701"])
    country: str = Field(..., min_length=1, max_length=100, examples=["USA"])
    property_type: PropertyType = Field(..., description="Kind of dwelling", examples=["house"])
    status: PropertyStatus = Field(default=PropertyStatus.FOR_SALE, examples=["for_sale"])
    bedrooms: int = Field(..., ge=0, le=100, description="Number of bedrooms", examples=[3])
    bathrooms: int = Field(..., ge=0, le=100, description="Number of bathrooms", examples=[2])
    area: int = Field(..., gt=0, description="Area in square feet", examples=[1800])
    year_built: Optional[int] = Field(None, ge=1000, le=3000, examples=[2010])
    features: List[str] = Field(
        default_factory=list,
        description="Feature tags",
        examples=[["garage", "pool"]]
    )

    @field_validator('title', 'description', 'address', 'city', 'state', 'zip_code', 'country')
    @classmethod
    def strip_text(cls, v):
        """Reject whitespace-only text fields."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('features', mode='before')
    @classmethod
    def validate_features(cls, v):
        if v is None:
            return []
        return parse_features(v)


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""


class PropertyUpdate(BaseModel):
    """Schema for a partial property update. Unset fields are left unchanged."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    price: Optional[int] = Field(None, gt=0)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, min_length=1, max_length=20)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    property_type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[int] = Field(None, ge=0, le=100)
    area: Optional[int] = Field(None, gt=0)
    year_built: Optional[int] = Field(None, ge=1000, le=3000)
    features: Optional[List[str]] = None

    @field_validator('title', 'description', 'address', 'city', 'state', 'zip_code', 'country')
    @classmethod
    def strip_text(cls, v):
        if v is not None:
            if not v.strip():
                raise ValueError("Field cannot be empty")
            return v.strip()
        return v

    @field_validator('features', mode='before')
    @classmethod
    def validate_features(cls, v):
        return parse_features(v)


class PropertyResponse(BaseModel):
    """Schema for property responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Property unique identifier", examples=[1])
    title: str
    description: str
    price: int
    address: str
    city: str
    state: str
    zip_code: str
    country: str
    property_type: PropertyType
    status: PropertyStatus
    bedrooms: int
    bathrooms: int
    area: int
    year_built: Optional[int] = None
    images: List[str] = Field(default_factory=list, description="Image URL paths in display order")
    features: List[str] = Field(default_factory=list)
    user_id: int = Field(..., description="ID of the owning user")
    created_at: datetime
    updated_at: datetime
