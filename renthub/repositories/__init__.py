"""
Repository layer for data access operations.
"""

from renthub.repositories.base import BaseRepository
from renthub.repositories.listing import ListingRepository, ListingSearchFilters
from renthub.repositories.transaction import TransactionRepository
from renthub.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ListingRepository",
    "ListingSearchFilters",
    "TransactionRepository",
    "UserRepository"
]
