"""
Repository layer for data access operations.
Provides the storage interface and its database and in-memory implementations.
"""

from homeverse.repositories.base import BaseRepository
from homeverse.repositories.interface import StorageRepository, PropertyFilters
from homeverse.repositories.user import UserRepository
from homeverse.repositories.property import PropertyRepository
from homeverse.repositories.inquiry import InquiryRepository
from homeverse.repositories.favorite import FavoriteRepository
from homeverse.repositories.session import SessionRepository
from homeverse.repositories.database import DatabaseStorage
from homeverse.repositories.memory import MemoryState, MemoryStorage

__all__ = [
    "BaseRepository",
    "StorageRepository",
    "PropertyFilters",
    "UserRepository",
    "PropertyRepository",
    "InquiryRepository",
    "FavoriteRepository",
    "SessionRepository",
    "DatabaseStorage",
    "MemoryState",
    "MemoryStorage",
]
