"""
API route handlers for the RentHomeHub API.
"""

from .auth import router as auth_router
from .rent import router as rent_router
from .transactions import router as transactions_router

__all__ = ["auth_router", "rent_router", "transactions_router"]
