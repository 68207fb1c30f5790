"""
Pydantic schemas for authentication requests and responses.
Handles registration, login and token data validation.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from renthub.schemas.user import UserResponse, UserSummary


class RegisterRequest(BaseModel):
    """Registration request schema."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's display name",
        examples=["Jane Doe"]
    )
    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jane@example.com"]
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User's password (minimum 8 characters)",
        examples=["securepassword123"]
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate and clean name."""
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(BaseModel):
    """
    Login request schema.
    Kept permissive so malformed credentials get the same answer as wrong ones.
    """

    email: str = Field(..., max_length=255, description="User's email address")
    password: str = Field(..., max_length=128, description="User's password")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class RegisterResponse(BaseModel):
    """Registration response schema."""

    message: str = Field(..., examples=["User registered successfully"])
    user: UserResponse


class LoginResponse(BaseModel):
    """Login response schema."""

    token: str = Field(..., description="JWT access token")
    access_token: str = Field(..., description="JWT access token, same value as token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds", examples=[3600])
    user: UserSummary = Field(..., description="Authenticated user information")
