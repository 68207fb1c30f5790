"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(
        None,
        description="Field name that caused the error",
        examples=["email"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid email format"]
    )

    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["value_error"]
    )


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Detailed error information for validation errors"
    )


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _example(code: str, message: str, details: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    error = {
        "code": code,
        "message": message,
        "timestamp": "2024-01-01T00:00:00Z",
        "request_id": "abc12345"
    }
    if details:
        error["details"] = details
    return {"error": error}


COMMON_ERROR_RESPONSES = {
    400: {
        "description": "Bad Request - Invalid request parameters",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "examples": {
                    "validation_error": {
                        "summary": "Validation Error",
                        "value": _example(
                            "VALIDATION_ERROR",
                            "Request validation failed",
                            [{"field": "price", "message": "Input should be greater than or equal to 0",
                              "type": "greater_than_equal"}]
                        )
                    },
                    "settlement_failed": {
                        "summary": "Settlement Failed",
                        "value": _example("SETTLEMENT_FAILED", "You already own this property")
                    }
                }
            }
        }
    },
    401: {
        "description": "Unauthorized - Authentication required",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "examples": {
                    "no_token": {
                        "summary": "No Token",
                        "value": _example("UNAUTHORIZED", "No token provided")
                    },
                    "invalid_token": {
                        "summary": "Invalid Token",
                        "value": _example("INVALID_TOKEN", "Invalid token")
                    }
                }
            }
        }
    },
    403: {
        "description": "Forbidden - Not the listing owner",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": _example("FORBIDDEN", "Not authorized to update this rental")
            }
        }
    },
    404: {
        "description": "Not Found - Resource not found",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": _example("NOT_FOUND", "Rental not found")
            }
        }
    },
    409: {
        "description": "Conflict - Integrity constraint violation",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": _example("INTEGRITY_ERROR", "Constraint violation: Duplicate value for unique field")
            }
        }
    },
    500: {
        "description": "Internal Server Error - Unexpected error",
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": _example(
                    "INTERNAL_SERVER_ERROR",
                    "An unexpected error occurred. Please try again later."
                )
            }
        }
    }
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication error response schemas."""
    return get_error_responses(400, 401, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 409, 500)
