"""
Listing service for rental listings with ownership validation.
Handles create, search, update and delete plus listing on the marketplace contract.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile
from renthub.config import get_settings
from renthub.repositories.listing import ListingRepository, ListingSearchFilters
from renthub.models.listing import Listing
from renthub.models.user import User
from renthub.schemas.listing import ListingCreate, ListingUpdate, ListingFilters
from renthub.services.image import ImageStorageService
from renthub.blockchain import ChainGateway, ChainError, AlreadyListedError
from renthub.utils.exceptions import (
    APIException,
    BadRequestError,
    BlockchainOperationError,
    ListingNotFoundError,
    ListingOwnershipError,
    ResourceLimitExceededError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingService:
    """
    Listing service managing rental listings.
    Only a listing's owner may change or remove it.
    """

    def __init__(self, db_session: AsyncSession, image_service: Optional[ImageStorageService] = None):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.image_service = image_service or ImageStorageService()
        self.max_images = get_settings().max_images_per_listing

    def _check_image_limit(self, total: int) -> None:
        if total > self.max_images:
            raise ResourceLimitExceededError(
                f"A listing can have at most {self.max_images} images"
            )

    async def create_listing(
        self,
        listing_data: ListingCreate,
        images: List[UploadFile],
        owner: User
    ) -> Listing:
        """
        Create a new listing owned by the requester.

        Args:
            listing_data: Validated listing fields
            images: Uploaded images, at most the configured limit
            owner: Authenticated user

        Returns:
            Created listing

        Raises:
            ResourceLimitExceededError: If too many images were uploaded
            ValidationError: If an image is invalid
        """
        listing_id = uuid.uuid4()
        stored = []
        try:
            images = self.image_service.present(images)
            self._check_image_limit(len(images))

            stored = await self.image_service.store_images(listing_id, images)

            create_data = listing_data.model_dump()
            create_data["id"] = listing_id
            create_data["owner_id"] = owner.id

            listing = await self.listing_repo.create_listing(create_data, stored)
            logger.info(f"Listing created by {owner.email}: {listing.title} (ID: {listing.id})")
            return listing

        except APIException:
            raise
        except Exception as e:
            self.image_service.delete_files([image.public_id for image in stored])
            logger.error(f"Failed to create listing for {owner.email}: {e}")
            raise BadRequestError("Error creating rental")

    async def search_listings(
        self,
        filters: ListingFilters,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Listing]:
        """Search listings with the given filters, newest first."""
        try:
            search_filters = ListingSearchFilters(**filters.model_dump())
            return await self.listing_repo.search_listings(search_filters, skip=skip, limit=limit)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Listing search failed: {e}")
            raise BadRequestError("Error fetching rentals")

    async def get_listing(self, listing_id: uuid.UUID) -> Listing:
        """
        Get a listing by id.

        Raises:
            ListingNotFoundError: If the listing does not exist
        """
        listing = await self.listing_repo.get_listing_with_details(listing_id)
        if not listing:
            raise ListingNotFoundError()
        return listing

    async def get_user_listings(self, user: User) -> List[Listing]:
        return await self.listing_repo.get_by_owner(user.id)

    async def get_owned_listing(self, listing_id: uuid.UUID, user: User, action: str) -> Listing:
        """
        Get a listing the user owns.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingOwnershipError: If the user is not the owner
        """
        listing = await self.get_listing(listing_id)
        if listing.owner_id != user.id:
            logger.warning(f"User {user.email} tried to {action} listing {listing_id} they don't own")
            raise ListingOwnershipError(action)
        return listing

    async def update_listing(
        self,
        listing_id: uuid.UUID,
        update_data: ListingUpdate,
        images: List[UploadFile],
        user: User
    ) -> Listing:
        """
        Merge provided fields into a listing and append new images.

        Args:
            listing_id: Listing to update
            update_data: Fields to overwrite, unset fields are kept
            images: New images appended after the existing ones
            user: Authenticated user, must be the owner

        Returns:
            Updated listing
        """
        stored = []
        try:
            listing = await self.get_owned_listing(listing_id, user, "update")

            images = self.image_service.present(images)
            self._check_image_limit(listing.image_count + len(images))

            stored = await self.image_service.store_images(
                listing.id, images, start_order=listing.image_count
            )

            changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
            updated = await self.listing_repo.apply_update(listing, changes, stored)

            logger.info(f"Listing {listing_id} updated by {user.email}: {sorted(changes)}")
            return updated

        except APIException:
            raise
        except Exception as e:
            self.image_service.delete_files([image.public_id for image in stored])
            logger.error(f"Failed to update listing {listing_id}: {e}")
            raise BadRequestError("Error updating rental")

    async def delete_listing(self, listing_id: uuid.UUID, user: User) -> None:
        """
        Delete a listing and its stored image files.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingOwnershipError: If the user is not the owner
        """
        try:
            listing = await self.get_owned_listing(listing_id, user, "delete")
            await self.listing_repo.delete_listing(listing)
            self.image_service.delete_listing_files(listing_id)
            logger.info(f"Listing {listing_id} deleted by {user.email}")
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete listing {listing_id}: {e}")
            raise BadRequestError("Error deleting rental")

    async def list_on_chain(
        self,
        listing_id: uuid.UUID,
        wallet_address: str,
        user: User,
        gateway: ChainGateway
    ) -> dict:
        """
        List a property on the marketplace contract at its listing price.

        When the contract already lists the token, its current state is
        returned instead of sending a transaction.

        Returns:
            Dictionary matching ChainListingResponse
        """
        listing = await self.get_owned_listing(listing_id, user, "list")
        token_id = listing.token_id

        try:
            chain_property = await gateway.get_property(token_id)
            transaction_hash = None

            if not chain_property.is_for_sale:
                try:
                    receipt = await gateway.list_property(token_id, listing.price, wallet_address)
                    transaction_hash = receipt.transaction_hash
                except AlreadyListedError:
                    logger.info(f"Token {token_id} was listed concurrently")
                chain_property = await gateway.get_property(token_id)
                already_listed = transaction_hash is None
            else:
                already_listed = True

        except ChainError as e:
            logger.warning(f"Chain listing of {listing_id} failed ({e.kind.value}): {e.user_message}")
            raise BlockchainOperationError(e.user_message, e.kind.value)

        return {
            "listing_id": str(listing.id),
            "token_id": str(token_id),
            "already_listed": already_listed,
            "owned_by_caller": chain_property.is_owned_by(wallet_address),
            "on_chain_owner": chain_property.owner,
            "on_chain_price": float(chain_property.price),
            "is_for_sale": chain_property.is_for_sale,
            "transaction_hash": transaction_hash,
            "network": gateway.network,
            "token_symbol": gateway.token_symbol,
        }
