"""
Custom exception classes for the RentHomeHub API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        details: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.details = details


class ValidationError(APIException):
    """Validation error exception."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR",
            details=field_errors
        )
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "No token provided"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )


class BadRequestError(APIException):
    """Bad request exception."""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(detail)
        self.error_code = "INVALID_CREDENTIALS"


class InvalidTokenError(UnauthorizedError):
    """Invalid or expired JWT token exception."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)
        self.error_code = "INVALID_TOKEN"


class DuplicateEmailError(BadRequestError):
    """Email already registered exception."""

    def __init__(self, detail: str = "User with this email already exists"):
        super().__init__(detail, error_code="DUPLICATE_EMAIL")


# Listing specific exceptions
class ListingNotFoundError(NotFoundError):
    """Listing not found exception."""

    def __init__(self, detail: str = "Rental not found"):
        super().__init__(detail)


class ListingOwnershipError(ForbiddenError):
    """Listing ownership violation exception."""

    def __init__(self, action: str):
        super().__init__(f"Not authorized to {action} this rental")


class ListingStatusError(BadRequestError):
    """Listing is not in a state that allows the operation."""

    def __init__(self, detail: str):
        super().__init__(detail, error_code="LISTING_STATUS")


class ResourceLimitExceededError(BadRequestError):
    """Resource limit exceeded exception."""

    def __init__(self, detail: str):
        super().__init__(detail, error_code="LIMIT_EXCEEDED")


# File upload exceptions
class FileUploadError(BadRequestError):
    """File upload error exception."""

    def __init__(self, detail: str):
        super().__init__(f"File upload error: {detail}", error_code="FILE_UPLOAD_ERROR")


class UnsupportedFileTypeError(BadRequestError):
    """Unsupported file type exception."""

    def __init__(self, file_type: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(
            f"Unsupported file type '{file_type}'. Supported types: {supported}",
            error_code="UNSUPPORTED_FILE_TYPE"
        )


class FileSizeExceededError(BadRequestError):
    """File size exceeded exception."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File size {size} bytes exceeds maximum allowed size {max_size} bytes",
            error_code="FILE_TOO_LARGE"
        )


# Settlement exceptions
class SettlementFailedError(BadRequestError):
    """Settlement could not be completed and no fallback applied."""

    def __init__(self, detail: str, failure_kind: Optional[str] = None):
        super().__init__(detail, error_code="SETTLEMENT_FAILED")
        self.failure_kind = failure_kind
        if failure_kind:
            self.details = [{"field": "payment_method", "message": detail, "type": failure_kind}]


class DuplicateTransactionError(ConflictError):
    """A blockchain transaction hash was already recorded."""

    def __init__(self, transaction_hash: str):
        super().__init__(
            f"Transaction {transaction_hash} has already been recorded",
            error_code="DUPLICATE_TRANSACTION"
        )


class BlockchainOperationError(BadRequestError):
    """A marketplace contract call failed."""

    def __init__(self, detail: str, failure_kind: str):
        super().__init__(detail, error_code="BLOCKCHAIN_ERROR")
        self.failure_kind = failure_kind
        self.details = [{"field": "blockchain", "message": detail, "type": failure_kind}]


class PayloadTooLargeError(APIException):
    """Request body exceeds the configured limit."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Request size {size} bytes exceeds maximum allowed size {max_size} bytes",
            error_code="PAYLOAD_TOO_LARGE"
        )
