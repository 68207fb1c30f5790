"""
Database models for the RentHomeHub API.
Includes User, Listing, ListingImage and Transaction models.
"""

from renthub.models.user import User
from renthub.models.listing import Listing, PropertyType, ListingStatus
from renthub.models.image import ListingImage
from renthub.models.transaction import (
    Transaction,
    TransactionKind,
    PaymentMethod,
    TransactionStatus,
)

__all__ = [
    "User",
    "Listing",
    "PropertyType",
    "ListingStatus",
    "ListingImage",
    "Transaction",
    "TransactionKind",
    "PaymentMethod",
    "TransactionStatus",
]
