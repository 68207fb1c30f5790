"""
Pydantic schemas for listing requests and responses.
Handles listing create/update form coercion, search filters and validation.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Any
from datetime import datetime
from decimal import Decimal
from renthub.models.listing import PropertyType, ListingStatus
from renthub.schemas.user import UserSummary


def split_amenities(value: Any) -> Any:
    """
    Accept amenities as a comma-separated string or a list of strings.
    Entries are trimmed and empty entries dropped.
    """
    if value is None:
        return value
    if isinstance(value, str):
        value = [value]
    if isinstance(value, (list, tuple)):
        amenities = []
        for entry in value:
            if not isinstance(entry, str):
                return value
            amenities.extend(part.strip() for part in entry.split(",") if part.strip())
        return amenities
    return value


def _lower_enum_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class LocationSchema(BaseModel):
    """Postal location of a listing."""

    address: str = Field(..., examples=["123 Main St"])
    city: str = Field(..., examples=["Austin"])
    state: str = Field(..., examples=["TX"])
    zip_code: str = Field(..., examples=["78701"])


class ListingBase(BaseModel):
    """Base listing schema with common fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Listing title",
        examples=["Sunny 2BR Apartment Downtown"]
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Detailed property description"
    )

    price: Decimal = Field(
        ...,
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Rent or sale price",
        examples=[1200]
    )

    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    state: str = Field(..., min_length=1, max_length=120)
    zip_code: str = Field(..., min_length=1, max_length=20)

    property_type: PropertyType = Field(..., description="Kind of property", examples=["apartment"])

    bedrooms: int = Field(..., ge=0, le=100, description="Number of bedrooms", examples=[2])

    bathrooms: Decimal = Field(
        ...,
        ge=0,
        le=100,
        decimal_places=1,
        description="Number of bathrooms, half baths allowed",
        examples=[1.5]
    )

    amenities: List[str] = Field(default_factory=list, description="Amenity names", examples=[["wifi", "parking"]])

    @field_validator('title', 'description', 'address', 'city', 'state', 'zip_code')
    @classmethod
    def strip_text(cls, v):
        """Trim text fields and reject blank values."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('amenities', mode='before')
    @classmethod
    def parse_amenities(cls, v):
        if v is None:
            return []
        return split_amenities(v)

    @field_validator('property_type', mode='before')
    @classmethod
    def normalize_property_type(cls, v):
        return _lower_enum_value(v)


class ListingCreate(ListingBase):
    """Schema for creating a new listing."""


class ListingUpdate(BaseModel):
    """Schema for updating a listing, every field optional."""

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=120)
    state: Optional[str] = Field(None, min_length=1, max_length=120)
    zip_code: Optional[str] = Field(None, min_length=1, max_length=20)
    property_type: Optional[PropertyType] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=1)
    amenities: Optional[List[str]] = None
    status: Optional[ListingStatus] = None

    @field_validator('title', 'description', 'address', 'city', 'state', 'zip_code')
    @classmethod
    def strip_text(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('amenities', mode='before')
    @classmethod
    def parse_amenities(cls, v):
        return split_amenities(v)

    @field_validator('property_type', 'status', mode='before')
    @classmethod
    def normalize_enums(cls, v):
        return _lower_enum_value(v)


class ListingFilters(BaseModel):
    """Query filters for listing search."""

    city: Optional[str] = Field(None, description="Partial, case-insensitive city match")
    state: Optional[str] = Field(None, description="Partial, case-insensitive state match")
    property_type: Optional[PropertyType] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    status: Optional[ListingStatus] = Field(ListingStatus.AVAILABLE)

    @field_validator('property_type', 'status', mode='before')
    @classmethod
    def normalize_enums(cls, v):
        return _lower_enum_value(v)

    @model_validator(mode='after')
    def validate_price_range(self):
        """Validate that min_price is not greater than max_price."""
        if self.min_price is not None and self.max_price is not None:
            if self.min_price > self.max_price:
                raise ValueError("Minimum price cannot be greater than maximum price")
        return self


class ListingImageResponse(BaseModel):
    """Stored image reference."""

    id: str
    url: str
    public_id: str


class ListingResponse(BaseModel):
    """Schema for listing responses."""

    id: str = Field(..., description="Listing's unique identifier")
    title: str
    description: str
    price: float
    location: LocationSchema
    property_type: PropertyType
    bedrooms: int
    bathrooms: float
    amenities: List[str]
    images: List[ListingImageResponse]
    owner_id: str
    owner: Optional[UserSummary] = None
    status: ListingStatus
    created_at: datetime
    updated_at: datetime


class ListingDeleteResponse(BaseModel):
    message: str = Field(..., examples=["Rental deleted successfully"])


class ChainListingRequest(BaseModel):
    """Request to list a property on the marketplace contract."""

    wallet_address: str = Field(
        ...,
        min_length=42,
        max_length=42,
        pattern=r"^0x[0-9a-fA-F]{40}$",
        description="Owner's wallet address"
    )


class ChainListingResponse(BaseModel):
    """On-chain listing state after a listing request."""

    listing_id: str
    token_id: str = Field(..., description="Contract token id, the integer value of the listing id")
    already_listed: bool = Field(..., description="True when the contract already listed the property")
    owned_by_caller: bool = Field(..., description="True when the caller's wallet owns the token")
    on_chain_owner: Optional[str] = None
    on_chain_price: Optional[float] = None
    is_for_sale: bool
    transaction_hash: Optional[str] = None
    network: str
    token_symbol: str
