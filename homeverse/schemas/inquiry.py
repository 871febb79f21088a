"""
Pydantic schemas for inquiry requests and responses.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from homeverse.models.inquiry import InquiryStatus


class InquiryCreate(BaseModel):
    """Contact form submission, optionally about a property."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Jane Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    phone: Optional[str] = Field(None, max_length=30)
    message: str = Field(..., min_length=1, max_length=5000)
    property_id: Optional[int] = Field(None, gt=0, description="Property the inquiry is about")

    @field_validator('name', 'message')
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class InquiryUpdate(BaseModel):
    """Inquiry status change."""

    status: InquiryStatus = Field(..., examples=["responded"])


class InquiryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    property_id: Optional[int] = None
    user_id: Optional[int] = None
    status: InquiryStatus
    created_at: datetime
