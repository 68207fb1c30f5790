"""
Listing model for rentable and sellable properties.
Handles listing data with location, pricing, status and ownership.
"""

from sqlalchemy import (
    String, Text, Integer, Numeric, JSON, Enum as SQLEnum, Index, ForeignKey, CheckConstraint, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from renthub.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from renthub.models.user import User
    from renthub.models.image import ListingImage


class PropertyType(str, enum.Enum):
    """Kinds of property a listing can describe."""
    APARTMENT = "apartment"
    HOUSE = "house"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    STUDIO = "studio"
    LOFT = "loft"


class ListingStatus(str, enum.Enum):
    """Availability of a listing."""
    AVAILABLE = "available"
    RENTED = "rented"
    PENDING = "pending"


class Listing(Base):
    """
    Listing model for managing rental and sale properties.
    Price and room counts are constrained non-negative at the database level too.
    """

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_listings_price_non_negative"),
        CheckConstraint("bedrooms >= 0", name="ck_listings_bedrooms_non_negative"),
        CheckConstraint("bathrooms >= 0", name="ck_listings_bathrooms_non_negative"),
    )

    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Rent or sale price"
    )

    # Location
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)

    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True
    )

    bedrooms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Number of bedrooms"
    )

    bathrooms: Mapped[Decimal] = mapped_column(
        Numeric(precision=4, scale=1),
        nullable=False,
        comment="Number of bathrooms, half baths allowed"
    )

    amenities: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list
    )

    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(ListingStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ListingStatus.AVAILABLE,
        index=True
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    owner: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    images: Mapped[List["ListingImage"]] = relationship(
        "ListingImage",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ListingImage.display_order"
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title[:30]}, price={self.price})>"

    @property
    def token_id(self) -> int:
        """Identifier of this listing on the marketplace contract."""
        return self.id.int

    @property
    def image_count(self) -> int:
        return len(self.images)

    def to_dict(self) -> dict:
        """
        Convert listing to dictionary with nested location and owner summary.

        Returns:
            Dictionary representation of the listing
        """
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "location": {
                "address": self.address,
                "city": self.city,
                "state": self.state,
                "zip_code": self.zip_code,
            },
            "property_type": self.property_type.value,
            "bedrooms": self.bedrooms,
            "bathrooms": float(self.bathrooms),
            "amenities": list(self.amenities or []),
            "images": [image.to_dict() for image in self.images],
            "owner_id": str(self.owner_id),
            "owner": self.owner.to_summary() if self.owner else None,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# Composite index for the default listing query (status filter, newest first)
status_created_index = Index(
    "idx_listings_status_created",
    Listing.status,
    Listing.created_at.desc()
)

# Composite index for location searches with price filtering
location_price_index = Index(
    "idx_listings_city_state_price",
    Listing.city,
    Listing.state,
    Listing.price
)
