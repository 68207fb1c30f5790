"""
Marketplace contract access for blockchain settlement.
"""

from renthub.blockchain.errors import (
    ChainFailureKind,
    ChainError,
    SelfOwnershipError,
    NotForSaleError,
    InsufficientFundsError,
    TransactionRevertedError,
    UserRejectedError,
    ChainUnavailableError,
    AlreadyListedError,
    error_for_kind,
)
from renthub.blockchain.gateway import (
    ChainGateway,
    ChainProperty,
    ChainReceipt,
    DisabledChainGateway,
)

__all__ = [
    "ChainFailureKind",
    "ChainError",
    "SelfOwnershipError",
    "NotForSaleError",
    "InsufficientFundsError",
    "TransactionRevertedError",
    "UserRejectedError",
    "ChainUnavailableError",
    "AlreadyListedError",
    "error_for_kind",
    "ChainGateway",
    "ChainProperty",
    "ChainReceipt",
    "DisabledChainGateway",
]
