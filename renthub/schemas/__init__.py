"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse
)

# User schemas
from .user import UserResponse, UserSummary

# Listing schemas
from .listing import (
    ListingCreate,
    ListingUpdate,
    ListingFilters,
    ListingResponse,
    ListingImageResponse,
    ListingDeleteResponse,
    ChainListingRequest,
    ChainListingResponse
)

# Transaction schemas
from .transaction import (
    BankDetails,
    SettlementRequest,
    SettlementResponse,
    SettlementAttempt,
    TransactionCreate,
    TransactionResponse
)

__all__ = [
    # Authentication
    "RegisterRequest",
    "RegisterResponse",
    "LoginRequest",
    "LoginResponse",

    # User
    "UserResponse",
    "UserSummary",

    # Listing
    "ListingCreate",
    "ListingUpdate",
    "ListingFilters",
    "ListingResponse",
    "ListingImageResponse",
    "ListingDeleteResponse",
    "ChainListingRequest",
    "ChainListingResponse",

    # Transaction
    "BankDetails",
    "SettlementRequest",
    "SettlementResponse",
    "SettlementAttempt",
    "TransactionCreate",
    "TransactionResponse"
]
