"""
Rental listing API endpoints for CRUD operations, search and on-chain listing.
Create and update take multipart forms so images upload with the listing fields.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Form, File, UploadFile
from typing import Optional, List, Dict, Any
from uuid import UUID

from renthub.models.user import User
from renthub.services.listing import ListingService
from renthub.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingFilters,
    ListingResponse,
    ListingDeleteResponse,
    ChainListingRequest,
    ChainListingResponse
)
from renthub.schemas.error import get_crud_error_responses, get_error_responses
from renthub.blockchain import ChainGateway
from renthub.utils.dependencies import (
    get_current_user,
    get_listing_service,
    get_chain_gateway
)


router = APIRouter(prefix="/rent", tags=["Rentals"])


def _provided(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Form fields the client actually sent."""
    return {key: value for key, value in fields.items() if value is not None and value != ""}


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create rental listing",
    description="Create a listing from a multipart form with up to 10 images",
    responses=get_crud_error_responses()
)
async def create_listing(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None, description="Rent or sale price"),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    zip_code: Optional[str] = Form(None),
    property_type: Optional[str] = Form(None, description="One of: apartment, house, condo, townhouse, studio, loft"),
    bedrooms: Optional[str] = Form(None),
    bathrooms: Optional[str] = Form(None),
    amenities: Optional[List[str]] = Form(None, description="Repeated fields or one comma-separated value"),
    images: Optional[List[UploadFile]] = File(None, description="Listing photos"),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Create a new rental listing owned by the requester.

    Form values are coerced by ListingCreate, so a missing or malformed
    field is reported as a 400 validation error.

    Raises:
        ValidationError: If a field or image is invalid
        ResourceLimitExceededError: If more than 10 images are uploaded
    """
    listing_data = ListingCreate.model_validate(_provided({
        "title": title,
        "description": description,
        "price": price,
        "address": address,
        "city": city,
        "state": state,
        "zip_code": zip_code,
        "property_type": property_type,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "amenities": amenities,
    }))

    listing = await listing_service.create_listing(listing_data, images or [], current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.get(
    "",
    response_model=List[ListingResponse],
    status_code=status.HTTP_200_OK,
    summary="Search rental listings",
    description="List listings newest first, filtered by location, type, bedrooms, price and status",
    responses=get_error_responses(400, 500)
)
async def list_listings(
    city: Optional[str] = Query(None, description="Partial, case-insensitive city match"),
    state: Optional[str] = Query(None, description="Partial, case-insensitive state match"),
    property_type: Optional[str] = Query(None, description="Exact property type"),
    bedrooms: Optional[int] = Query(None, ge=0, description="Exact number of bedrooms"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum price, inclusive"),
    max_price: Optional[float] = Query(None, ge=0, description="Maximum price, inclusive"),
    status_filter: Optional[str] = Query(None, alias="status", description="Listing status, defaults to available"),
    skip: int = Query(0, ge=0, description="Number of listings to skip"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Maximum number of listings"),
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingResponse]:
    """
    Search listings.

    Raises:
        ValidationError: If min_price is greater than max_price
    """
    filters = ListingFilters.model_validate(_provided({
        "city": city,
        "state": state,
        "property_type": property_type,
        "bedrooms": bedrooms,
        "min_price": min_price,
        "max_price": max_price,
        "status": status_filter,
    }))

    listings = await listing_service.search_listings(filters, skip=skip, limit=limit)
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.get(
    "/mine",
    response_model=List[ListingResponse],
    status_code=status.HTTP_200_OK,
    summary="Get my listings",
    description="All listings owned by the authenticated user, any status",
    responses=get_error_responses(401, 500)
)
async def get_my_listings(
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingResponse]:
    listings = await listing_service.get_user_listings(current_user)
    return [ListingResponse.model_validate(listing.to_dict()) for listing in listings]


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing by ID",
    description="Get a listing with its images and owner summary",
    responses=get_error_responses(400, 404, 500)
)
async def get_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Get a listing by id.

    Raises:
        ListingNotFoundError: If the listing does not exist
    """
    listing = await listing_service.get_listing(listing_id)
    return ListingResponse.model_validate(listing.to_dict())


@router.put(
    "/{listing_id}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Update listing",
    description="Merge the sent fields into a listing and append new images. Owner only.",
    responses=get_crud_error_responses()
)
async def update_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    zip_code: Optional[str] = Form(None),
    property_type: Optional[str] = Form(None),
    bedrooms: Optional[str] = Form(None),
    bathrooms: Optional[str] = Form(None),
    amenities: Optional[List[str]] = Form(None),
    listing_status: Optional[str] = Form(None, alias="status"),
    images: Optional[List[UploadFile]] = File(None, description="Photos appended to the existing ones"),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingResponse:
    """
    Update a listing. Fields left out of the form keep their values.

    Raises:
        ListingNotFoundError: If the listing does not exist
        ListingOwnershipError: If the requester is not the owner
    """
    update_data = ListingUpdate.model_validate(_provided({
        "title": title,
        "description": description,
        "price": price,
        "address": address,
        "city": city,
        "state": state,
        "zip_code": zip_code,
        "property_type": property_type,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "amenities": amenities,
        "status": listing_status,
    }))

    listing = await listing_service.update_listing(listing_id, update_data, images or [], current_user)
    return ListingResponse.model_validate(listing.to_dict())


@router.delete(
    "/{listing_id}",
    response_model=ListingDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete listing",
    description="Delete a listing and its stored images. Owner only.",
    responses=get_crud_error_responses()
)
async def delete_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDeleteResponse:
    await listing_service.delete_listing(listing_id, current_user)
    return ListingDeleteResponse(message="Rental deleted successfully")


@router.post(
    "/{listing_id}/chain-listing",
    response_model=ChainListingResponse,
    status_code=status.HTTP_200_OK,
    summary="List property on the marketplace contract",
    description="Offer the property for sale on chain at its listing price. Owner only.",
    responses=get_crud_error_responses()
)
async def list_on_chain(
    request_data: ChainListingRequest,
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service),
    gateway: ChainGateway = Depends(get_chain_gateway)
) -> ChainListingResponse:
    """
    List a property on the marketplace contract.

    Raises:
        ListingOwnershipError: If the requester is not the owner
        BlockchainOperationError: If the contract call fails
    """
    result = await listing_service.list_on_chain(
        listing_id, request_data.wallet_address, current_user, gateway
    )
    return ChainListingResponse.model_validate(result)
