"""
Property repository for managing listings with filtering.
Provides the browse, dashboard and featured queries over the properties table.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, desc
from homeverse.repositories.base import BaseRepository
from homeverse.repositories.interface import PropertyFilters
from homeverse.models.property import Property
from homeverse.models.user import User
from homeverse.database import utc_now
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    Filtering is plain predicate composition; results are not paginated here.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a new property owned by an existing user.

        Args:
            property_data: Dictionary containing property information

        Returns:
            Created property instance

        Raises:
            ValueError: If the owning user does not exist
        """
        owner_id = property_data.get("user_id")
        owner = await self.db.get(User, owner_id) if owner_id is not None else None
        if owner is None:
            raise ValueError(f"Owner user {owner_id} does not exist")

        now = utc_now()
        create_data = {
            "images": [],
            "features": [],
            **property_data,
            "created_at": now,
            "updated_at": now,
        }
        created_property = await self.create(create_data)
        logger.info(f"Created property: {created_property.title} (ID: {created_property.id})")
        return created_property

    async def update_property(self, property_id: int, property_data: Dict[str, Any]) -> Optional[Property]:
        """
        Merge partial fields onto a property and refresh updated_at.

        Args:
            property_id: ID of the property
            property_data: Fields to change

        Returns:
            Updated property or None if not found
        """
        update_data = {**property_data, "updated_at": utc_now()}
        update_data.pop("created_at", None)
        return await self.update(property_id, update_data)

    async def search_properties(self, filters: Optional[PropertyFilters] = None) -> List[Property]:
        """
        List properties matching the filters, in insertion order.

        Args:
            filters: PropertyFilters instance with search criteria

        Returns:
            List of matching properties
        """
        try:
            query = select(Property)

            conditions = self._build_filter_conditions(filters) if filters else []
            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(Property.id)

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} results for {filters}")
            return list(properties)
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertyFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: PropertyFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        # Location matches city or state (case-insensitive partial match)
        if filters.location:
            conditions.append(
                or_(
                    Property.city.icontains(filters.location, autoescape=True),
                    Property.state.icontains(filters.location, autoescape=True)
                )
            )

        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)

        if filters.status is not None:
            conditions.append(Property.status == filters.status)

        # Price range filters
        if filters.price_min is not None:
            conditions.append(Property.price >= filters.price_min)
        if filters.price_max is not None:
            conditions.append(Property.price <= filters.price_max)

        # Minimum room counts
        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.bedrooms)
        if filters.bathrooms is not None:
            conditions.append(Property.bathrooms >= filters.bathrooms)

        # Area filters
        if filters.area_min is not None:
            conditions.append(Property.area >= filters.area_min)
        if filters.area_max is not None:
            conditions.append(Property.area <= filters.area_max)

        return conditions

    async def get_properties_by_user(self, user_id: int) -> List[Property]:
        """
        Get properties owned by a specific user.

        Args:
            user_id: ID of the owner

        Returns:
            List of the user's properties
        """
        properties = await self.get_multi(filters={"user_id": user_id})
        logger.debug(f"Retrieved {len(properties)} properties for user {user_id}")
        return properties

    async def get_featured_properties(self, limit: int = 6) -> List[Property]:
        """
        Get the most recently created properties.

        Args:
            limit: Maximum number of properties to return

        Returns:
            List of properties, newest first
        """
        try:
            query = (
                select(Property)
                .order_by(desc(Property.created_at), desc(Property.id))
                .limit(limit)
            )

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Retrieved {len(properties)} featured properties")
            return list(properties)
        except Exception as e:
            logger.error(f"Failed to get featured properties: {e}")
            raise
