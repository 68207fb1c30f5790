"""
Service layer for business logic implementation.
Contains services for authentication, listings, images, transactions, settlement and error handling.
"""

from .auth import AuthService
from .image import ImageStorageService
from .listing import ListingService
from .transaction import TransactionService
from .settlement import SettlementService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "ImageStorageService",
    "ListingService",
    "TransactionService",
    "SettlementService",
    "ErrorHandlerService"
]
