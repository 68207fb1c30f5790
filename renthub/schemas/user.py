"""
Pydantic schemas for user responses.
"""

from pydantic import BaseModel, Field
from datetime import datetime


class UserSummary(BaseModel):
    """Owner, payer or payee summary embedded in other resources."""

    id: str = Field(..., description="User's unique identifier")
    name: str = Field(..., description="User's display name", examples=["Jane Doe"])
    email: str = Field(..., description="User's email address", examples=["jane@example.com"])


class UserResponse(UserSummary):
    """User response schema (excluding sensitive data)."""

    created_at: datetime = Field(..., description="Account creation timestamp")
