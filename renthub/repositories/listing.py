"""
Listing repository for managing rental listings with search and filtering.
Provides the listing queries used by the rent endpoints and settlement.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, desc
from sqlalchemy.orm import selectinload
from renthub.repositories.base import BaseRepository
from renthub.models.listing import Listing, PropertyType, ListingStatus
from renthub.models.image import ListingImage
from typing import Optional, List, Dict, Any
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


def _contains_pattern(value: str) -> str:
    """LIKE pattern matching `value` anywhere, with wildcards escaped."""
    escaped = value.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ListingSearchFilters:
    """Data class for listing search filters."""

    def __init__(
        self,
        city: Optional[str] = None,
        state: Optional[str] = None,
        property_type: Optional[PropertyType] = None,
        bedrooms: Optional[int] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        status: Optional[ListingStatus] = ListingStatus.AVAILABLE,
        owner_id: Optional[uuid.UUID] = None
    ):
        self.city = city
        self.state = state
        self.property_type = property_type
        self.bedrooms = bedrooms
        self.min_price = min_price
        self.max_price = max_price
        self.status = status
        self.owner_id = owner_id


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listings.
    Owner and images are always loaded with the listing.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    def _detail_query(self):
        return (
            select(Listing)
            .options(
                selectinload(Listing.owner),
                selectinload(Listing.images)
            )
            .execution_options(populate_existing=True)
        )

    async def create_listing(
        self,
        listing_data: Dict[str, Any],
        images: Optional[List[ListingImage]] = None
    ) -> Listing:
        """
        Create a new listing together with its image records.

        Args:
            listing_data: Listing column values, may carry a pre-generated id
            images: ListingImage records for already stored files

        Returns:
            Created listing with owner and images loaded
        """
        try:
            listing = Listing(**listing_data)
            for image in images or []:
                listing.images.append(image)

            self.db.add(listing)
            await self.db.commit()
            logger.info(f"Created listing: {listing.title} (ID: {listing.id})")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create listing: {e}")
            raise

        return await self.get_listing_with_details(listing.id)

    async def get_listing_with_details(self, listing_id: uuid.UUID) -> Optional[Listing]:
        """
        Get listing with owner and images.

        Args:
            listing_id: UUID of the listing

        Returns:
            Listing with loaded relationships or None if not found
        """
        try:
            result = await self.db.execute(self._detail_query().where(Listing.id == listing_id))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get listing with details {listing_id}: {e}")
            raise

    async def search_listings(
        self,
        filters: ListingSearchFilters,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Listing]:
        """
        Search listings, newest first.

        Args:
            filters: ListingSearchFilters with search criteria
            skip: Number of records to skip
            limit: Maximum number of records, None for all

        Returns:
            Matching listings
        """
        try:
            query = self._detail_query()

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(desc(Listing.created_at), desc(Listing.id))

            if skip:
                query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)

            result = await self.db.execute(query)
            listings = list(result.scalars().all())

            logger.debug(f"Listing search returned {len(listings)} results")
            return listings
        except Exception as e:
            logger.error(f"Failed to search listings: {e}")
            raise

    def _build_filter_conditions(self, filters: ListingSearchFilters) -> List:
        """Build WHERE conditions from search filters."""
        conditions = []

        # Partial, case-insensitive location match; user input is matched literally
        if filters.city:
            conditions.append(Listing.city.ilike(_contains_pattern(filters.city), escape="\\"))
        if filters.state:
            conditions.append(Listing.state.ilike(_contains_pattern(filters.state), escape="\\"))

        if filters.property_type is not None:
            conditions.append(Listing.property_type == filters.property_type)
        if filters.bedrooms is not None:
            conditions.append(Listing.bedrooms == filters.bedrooms)

        # Inclusive price range
        if filters.min_price is not None:
            conditions.append(Listing.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Listing.price <= filters.max_price)

        if filters.status is not None:
            conditions.append(Listing.status == filters.status)
        if filters.owner_id is not None:
            conditions.append(Listing.owner_id == filters.owner_id)

        return conditions

    async def get_by_owner(self, owner_id: uuid.UUID) -> List[Listing]:
        """All listings of one owner regardless of status."""
        return await self.search_listings(ListingSearchFilters(status=None, owner_id=owner_id))

    async def apply_update(
        self,
        listing: Listing,
        update_data: Dict[str, Any],
        new_images: Optional[List[ListingImage]] = None
    ) -> Listing:
        """
        Merge field values into a loaded listing and append images.

        Args:
            listing: Listing loaded through this repository
            update_data: Column values to overwrite
            new_images: Image records to append after the existing ones

        Returns:
            The reloaded listing
        """
        try:
            for field, value in update_data.items():
                setattr(listing, field, value)

            for image in new_images or []:
                listing.images.append(image)

            await self.db.commit()
            logger.info(f"Updated listing: {listing.id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update listing {listing.id}: {e}")
            raise

        return await self.get_listing_with_details(listing.id)

    async def delete_listing(self, listing: Listing) -> None:
        """Delete a listing and its image records."""
        try:
            await self.db.delete(listing)
            await self.db.commit()
            logger.info(f"Deleted listing: {listing.id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete listing {listing.id}: {e}")
            raise
