"""
Contract gateway interface used by the settlement and listing services.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol, runtime_checkable

from renthub.blockchain.errors import ChainUnavailableError


@dataclass(frozen=True)
class ChainProperty:
    """Marketplace contract state of one token."""

    token_id: int
    owner: Optional[str]
    price: Decimal
    is_for_sale: bool

    def is_owned_by(self, address: Optional[str]) -> bool:
        if not self.owner or not address:
            return False
        return self.owner.lower() == address.lower()


@dataclass(frozen=True)
class ChainReceipt:
    """Confirmed contract transaction."""

    transaction_hash: str
    network: str
    token_symbol: str
    wallet_address: str
    price: Decimal


@runtime_checkable
class ChainGateway(Protocol):
    """
    Marketplace contract operations and plain rent payments.
    Every failure is raised as a ChainError subclass.

    `purchase_property` transfers the token to the buyer, `send_payment`
    only moves value to the marketplace payment address.
    """

    network: str
    token_symbol: str

    async def get_property(self, token_id: int) -> ChainProperty:
        ...

    async def list_property(self, token_id: int, price: Decimal, seller: str) -> ChainReceipt:
        ...

    async def purchase_property(self, token_id: int, price: Decimal, buyer: str) -> ChainReceipt:
        ...

    async def send_payment(self, amount: Decimal, payer: str) -> ChainReceipt:
        ...


class DisabledChainGateway:
    """Gateway used when no provider or contract is configured."""

    def __init__(self, network: str, token_symbol: str):
        self.network = network
        self.token_symbol = token_symbol

    async def get_property(self, token_id: int) -> ChainProperty:
        raise ChainUnavailableError("Blockchain payments are not configured")

    async def list_property(self, token_id: int, price: Decimal, seller: str) -> ChainReceipt:
        raise ChainUnavailableError("Blockchain payments are not configured")

    async def purchase_property(self, token_id: int, price: Decimal, buyer: str) -> ChainReceipt:
        raise ChainUnavailableError("Blockchain payments are not configured")

    async def send_payment(self, amount: Decimal, payer: str) -> ChainReceipt:
        raise ChainUnavailableError("Blockchain payments are not configured")
