"""
Typed failures of blockchain operations.
Callers branch on the exception class or its kind, never on message text.
"""

import enum
from typing import Optional


class ChainFailureKind(str, enum.Enum):
    SELF_OWNERSHIP = "self_ownership"
    NOT_FOR_SALE = "not_for_sale"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    REVERTED = "reverted"
    USER_REJECTED = "user_rejected"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class ChainError(Exception):
    """Base class of blockchain failures."""

    kind: ChainFailureKind = ChainFailureKind.UNKNOWN
    default_message = "The blockchain transaction failed"

    def __init__(self, message: Optional[str] = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class SelfOwnershipError(ChainError):
    kind = ChainFailureKind.SELF_OWNERSHIP
    default_message = "You cannot purchase your own property on the blockchain"


class NotForSaleError(ChainError):
    kind = ChainFailureKind.NOT_FOR_SALE
    default_message = "This property is not currently for sale on the blockchain"


class InsufficientFundsError(ChainError):
    kind = ChainFailureKind.INSUFFICIENT_FUNDS
    default_message = "You don't have enough funds in your wallet to complete this purchase"


class TransactionRevertedError(ChainError):
    kind = ChainFailureKind.REVERTED
    default_message = "The transaction was reverted by the blockchain"


class UserRejectedError(ChainError):
    kind = ChainFailureKind.USER_REJECTED
    default_message = "The transaction was rejected by the wallet owner"


class ChainUnavailableError(ChainError):
    kind = ChainFailureKind.UNAVAILABLE
    default_message = "Blockchain payments are currently unavailable"


class AlreadyListedError(TransactionRevertedError):
    """The contract refused a listing because the token is already for sale."""

    default_message = "This property is already listed on the blockchain"


ERRORS_BY_KIND = {
    error_class.kind: error_class
    for error_class in (
        ChainError,
        SelfOwnershipError,
        NotForSaleError,
        InsufficientFundsError,
        TransactionRevertedError,
        UserRejectedError,
        ChainUnavailableError,
    )
}


def error_for_kind(kind: ChainFailureKind, message: Optional[str] = None) -> ChainError:
    """Build the exception matching a failure kind."""
    return ERRORS_BY_KIND[ChainFailureKind(kind)](message)
