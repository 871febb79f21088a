"""
Pydantic schemas for favorites.
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class FavoriteCreate(BaseModel):
    property_id: int = Field(..., gt=0, description="Property to bookmark", examples=[1])


class FavoriteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    property_id: int
    created_at: datetime
