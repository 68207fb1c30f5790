"""
Marketplace contract gateway backed by web3.py.
Provider calls block, so each operation runs in a worker thread.
"""

import asyncio
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception, Web3RPCError

from renthub.blockchain.errors import (
    AlreadyListedError,
    ChainError,
    ChainUnavailableError,
    InsufficientFundsError,
    NotForSaleError,
    SelfOwnershipError,
    TransactionRevertedError,
    UserRejectedError,
)
from renthub.blockchain.gateway import ChainProperty, ChainReceipt

logger = logging.getLogger(__name__)

# Revert reasons emitted by the PropertyMarket contract
REVERT_REASONS = (
    ("owner cannot buy", SelfOwnershipError),
    ("not for sale", NotForSaleError),
    ("insufficient payment", InsufficientFundsError),
    ("already listed", AlreadyListedError),
    ("already for sale", AlreadyListedError),
)


def load_contract_abi(path: str) -> list:
    """
    Read a contract ABI from a JSON file.
    Accepts either a bare ABI list or a build artifact with an "abi" key.
    """
    with open(Path(path), encoding="utf-8") as abi_file:
        data = json.load(abi_file)
    if isinstance(data, dict):
        data = data["abi"]
    return data


# JSON-RPC error codes (EIP-1193 / EIP-1474)
USER_REJECTED_CODE = 4001
EXECUTION_REVERTED_CODE = 3
SERVER_ERROR_CODE = -32000


def _rpc_error(error: Exception) -> Optional[dict]:
    """The JSON-RPC error object carried by a provider exception, if any."""
    if isinstance(error, Web3RPCError):
        response = error.rpc_response or {}
        payload = response.get("error") if isinstance(response, dict) else None
    elif error.args and isinstance(error.args[0], dict):
        # Older providers raise ValueError with the error object as argument
        payload = error.args[0]
    else:
        payload = None
    return payload if isinstance(payload, dict) else None


def translate_error(error: Exception) -> ChainError:
    """
    Map a web3 or transport exception onto a typed chain error.
    JSON-RPC error codes are used first, message text only as a last resort.
    """
    if isinstance(error, ChainError):
        return error

    message = str(error).lower()

    if isinstance(error, ContractLogicError):
        for reason, error_class in REVERT_REASONS:
            if reason in message:
                return error_class()
        return TransactionRevertedError()

    if isinstance(error, TimeExhausted):
        return ChainUnavailableError("Timed out waiting for the transaction to be confirmed")

    rpc_error = _rpc_error(error)
    if rpc_error is not None:
        code = rpc_error.get("code")
        rpc_message = str(rpc_error.get("message", "")).lower()
        if code == USER_REJECTED_CODE:
            return UserRejectedError()
        if code == EXECUTION_REVERTED_CODE:
            return TransactionRevertedError()
        if code == SERVER_ERROR_CODE and "insufficient funds" in rpc_message:
            return InsufficientFundsError()

    if "user rejected" in message or "user denied" in message:
        return UserRejectedError()
    if "insufficient funds" in message:
        return InsufficientFundsError()
    if "revert" in message:
        return TransactionRevertedError()

    if isinstance(error, OSError):
        return ChainUnavailableError("Could not reach the blockchain provider")

    return ChainError()


class Web3ContractGateway:
    """
    PropertyMarket contract client.

    Transactions are sent from the given wallet address, so the provider must
    be able to sign for it (a node holding the account's key).
    """

    def __init__(
        self,
        w3: Web3,
        contract: Any,
        network: str,
        token_symbol: str,
        purchase_gas_limit: int = 750000,
        listing_gas_limit: int = 500000,
        receipt_timeout: int = 120,
        payment_address: Optional[str] = None,
        payment_gas_limit: int = 21000
    ):
        self.w3 = w3
        self.contract = contract
        self.network = network
        self.token_symbol = token_symbol
        self.purchase_gas_limit = purchase_gas_limit
        self.listing_gas_limit = listing_gas_limit
        self.receipt_timeout = receipt_timeout
        self.payment_address = Web3.to_checksum_address(payment_address) if payment_address else None
        self.payment_gas_limit = payment_gas_limit

    @classmethod
    def from_settings(cls, settings) -> "Web3ContractGateway":
        """Build a gateway from application settings."""
        w3 = Web3(Web3.HTTPProvider(settings.web3_provider_url))
        contract = w3.eth.contract(
            address=Web3.to_checksum_address(settings.contract_address),
            abi=load_contract_abi(settings.contract_abi_path)
        )
        return cls(
            w3,
            contract,
            network=settings.chain_network,
            token_symbol=settings.chain_token_symbol,
            purchase_gas_limit=settings.purchase_gas_limit,
            listing_gas_limit=settings.listing_gas_limit,
            receipt_timeout=settings.chain_receipt_timeout,
            payment_address=settings.payment_address,
            payment_gas_limit=settings.payment_gas_limit
        )

    async def _run(self, operation: Callable, *args) -> Any:
        try:
            return await asyncio.to_thread(operation, *args)
        except ChainError:
            raise
        except (Web3Exception, ValueError, OSError) as e:
            chain_error = translate_error(e)
            logger.warning(f"Blockchain call failed ({chain_error.kind.value}): {e}")
            raise chain_error from e

    async def get_property(self, token_id: int) -> ChainProperty:
        return await self._run(self._get_property, token_id)

    async def list_property(self, token_id: int, price: Decimal, seller: str) -> ChainReceipt:
        return await self._run(self._list_property, token_id, price, seller)

    async def purchase_property(self, token_id: int, price: Decimal, buyer: str) -> ChainReceipt:
        return await self._run(self._purchase_property, token_id, price, buyer)

    async def send_payment(self, amount: Decimal, payer: str) -> ChainReceipt:
        return await self._run(self._send_payment, amount, payer)

    def _get_property(self, token_id: int) -> ChainProperty:
        raw = self.contract.functions.getProperty(token_id).call()
        return self._parse_property(token_id, raw)

    def _parse_property(self, token_id: int, raw: Any) -> ChainProperty:
        if isinstance(raw, dict):
            owner, price_wei, is_for_sale = raw["owner"], raw["price"], raw["isForSale"]
        else:
            _, owner, price_wei, is_for_sale = raw
        if owner and int(owner, 16) == 0:
            owner = None
        return ChainProperty(
            token_id=token_id,
            owner=owner,
            price=Decimal(Web3.from_wei(price_wei, "ether")),
            is_for_sale=bool(is_for_sale)
        )

    def _ensure_connected(self) -> None:
        if not self.w3.is_connected():
            raise ChainUnavailableError("Could not reach the blockchain provider")

    def _confirm(self, tx_hash: Any) -> str:
        """Wait for a successful receipt of a sent transaction."""
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt["status"] == 0:
            raise TransactionRevertedError()
        return Web3.to_hex(tx_hash)

    def _send(self, function_call: Any, tx_params: dict) -> str:
        """Send a contract transaction and wait for a successful receipt."""
        return self._confirm(function_call.transact(tx_params))

    def _check_balance(self, address: str, amount_wei: int) -> None:
        balance = self.w3.eth.get_balance(address)
        if balance < amount_wei:
            raise InsufficientFundsError(
                f"Insufficient funds. You need {Web3.from_wei(amount_wei, 'ether')} {self.token_symbol} "
                f"but your balance is {Web3.from_wei(balance, 'ether')} {self.token_symbol}"
            )

    def _list_property(self, token_id: int, price: Decimal, seller: str) -> ChainReceipt:
        self._ensure_connected()
        seller = Web3.to_checksum_address(seller)
        price_wei = Web3.to_wei(price, "ether")

        tx_hash = self._send(
            self.contract.functions.listProperty(token_id, price_wei),
            {"from": seller, "gas": self.listing_gas_limit}
        )
        logger.info(f"Listed token {token_id} on {self.network}: {tx_hash}")
        return ChainReceipt(
            transaction_hash=tx_hash,
            network=self.network,
            token_symbol=self.token_symbol,
            wallet_address=seller,
            price=Decimal(price)
        )

    def _purchase_property(self, token_id: int, price: Decimal, buyer: str) -> ChainReceipt:
        self._ensure_connected()
        buyer = Web3.to_checksum_address(buyer)
        price_wei = Web3.to_wei(price, "ether")

        self._check_balance(buyer, price_wei)

        chain_property = self._get_property(token_id)
        if chain_property.is_owned_by(buyer):
            raise SelfOwnershipError()
        if not chain_property.is_for_sale:
            raise NotForSaleError()

        paid = Decimal(price)
        listed_wei = Web3.to_wei(chain_property.price, "ether")
        if listed_wei != price_wei:
            logger.warning(
                f"Price mismatch for token {token_id}: listed {chain_property.price}, offered {price}"
            )
            price_wei = listed_wei
            paid = chain_property.price

        tx_hash = self._send(
            self.contract.functions.purchaseProperty(token_id),
            {"from": buyer, "value": price_wei, "gas": self.purchase_gas_limit}
        )
        logger.info(f"Purchased token {token_id} on {self.network}: {tx_hash}")
        return ChainReceipt(
            transaction_hash=tx_hash,
            network=self.network,
            token_symbol=self.token_symbol,
            wallet_address=buyer,
            price=paid
        )

    def _send_payment(self, amount: Decimal, payer: str) -> ChainReceipt:
        """Plain value transfer to the payment address, no contract call."""
        if not self.payment_address:
            raise ChainUnavailableError("Blockchain rent payments are not configured")
        self._ensure_connected()
        payer = Web3.to_checksum_address(payer)
        amount_wei = Web3.to_wei(amount, "ether")

        self._check_balance(payer, amount_wei)

        tx_hash = self._confirm(self.w3.eth.send_transaction({
            "from": payer,
            "to": self.payment_address,
            "value": amount_wei,
            "gas": self.payment_gas_limit
        }))
        logger.info(f"Sent payment of {amount} {self.token_symbol} on {self.network}: {tx_hash}")
        return ChainReceipt(
            transaction_hash=tx_hash,
            network=self.network,
            token_symbol=self.token_symbol,
            wallet_address=payer,
            price=Decimal(amount)
        )
