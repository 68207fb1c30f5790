"""
Middleware package for the RentHomeHub API.
"""

from .validation import ValidationMiddleware

__all__ = ["ValidationMiddleware"]
