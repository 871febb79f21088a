"""
Database models for the HomeVerse Listings API.
Includes User, Property, Inquiry, Favorite and UserSession models.
"""

from homeverse.models.user import User, UserRole, LISTING_ROLES
from homeverse.models.property import Property, PropertyType, PropertyStatus
from homeverse.models.inquiry import Inquiry, InquiryStatus
from homeverse.models.favorite import Favorite
from homeverse.models.session import UserSession

__all__ = [
    "User",
    "UserRole",
    "LISTING_ROLES",
    "Property",
    "PropertyType",
    "PropertyStatus",
    "Inquiry",
    "InquiryStatus",
    "Favorite",
    "UserSession",
]
