"""
Settlement service: blockchain payment first, traditional payment as fallback.
"""

from typing import Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from renthub.config import get_settings
from renthub.blockchain import ChainGateway, ChainError, ChainReceipt
from renthub.models.listing import Listing
from renthub.models.transaction import PaymentMethod, Transaction, TransactionKind
from renthub.models.user import User
from renthub.schemas.transaction import SettlementRequest
from renthub.services.transaction import TransactionService
from renthub.utils.exceptions import BadRequestError, ValidationError, SettlementFailedError
import logging

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "Blockchain payment failed. Your payment was recorded as a traditional payment pending confirmation."


class SettlementService:
    """
    Settles a rent or purchase of one listing.

    At most one blockchain attempt is made, followed by at most one
    traditional attempt when the failure kind allows the fallback.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        gateway: ChainGateway,
        fallback_kinds: Optional[Iterable[str]] = None
    ):
        self.db = db_session
        self.gateway = gateway
        self.transaction_service = TransactionService(db_session)
        if fallback_kinds is None:
            fallback_kinds = get_settings().settlement_fallback_kinds
        self.fallback_kinds = set(fallback_kinds)

    def _validate_payment_details(self, request: SettlementRequest) -> None:
        if request.payment_method == PaymentMethod.BLOCKCHAIN and not request.wallet_address:
            raise BadRequestError(
                "Wallet not connected. Please connect your wallet to pay with blockchain.",
                error_code="WALLET_NOT_CONNECTED"
            )
        if request.payment_method == PaymentMethod.TRADITIONAL and request.bank_details is None:
            raise ValidationError(
                "Bank details are required for traditional payment",
                field_errors=[{"field": "bank_details", "message": "Field required", "type": "missing"}]
            )

    async def _pay_on_chain(self, listing: Listing, request: SettlementRequest) -> ChainReceipt:
        # Only a purchase moves the token, rent is a plain value transfer
        if request.kind == TransactionKind.PURCHASE:
            return await self.gateway.purchase_property(
                listing.token_id, listing.price, request.wallet_address
            )
        return await self.gateway.send_payment(listing.price, request.wallet_address)

    async def settle(self, request: SettlementRequest, user: User) -> dict:
        """
        Settle a rent or purchase.

        Args:
            request: Listing, kind, preferred payment method and payment details
            user: Tenant or buyer

        Returns:
            Dictionary matching SettlementResponse

        Raises:
            SettlementFailedError: If the blockchain attempt fails with a kind
                excluded from the fallback
        """
        listing = await self.transaction_service.get_settleable_listing(request.listing_id, user)
        self._validate_payment_details(request)

        attempts: List[dict] = []
        notices: List[str] = []
        fell_back = False
        transaction: Optional[Transaction] = None

        if request.payment_method == PaymentMethod.BLOCKCHAIN:
            try:
                receipt = await self._pay_on_chain(listing, request)
            except ChainError as e:
                kind = e.kind.value
                logger.warning(f"Blockchain {request.kind.value} of listing {listing.id} failed ({kind}): {e.user_message}")
                attempts.append({
                    "method": PaymentMethod.BLOCKCHAIN,
                    "outcome": "failed",
                    "failure_kind": kind,
                    "message": e.user_message
                })
                notices.append(e.user_message)

                if kind not in self.fallback_kinds:
                    raise SettlementFailedError(e.user_message, kind)

                notices.append(FALLBACK_NOTICE)
                fell_back = True
            else:
                attempts.append({
                    "method": PaymentMethod.BLOCKCHAIN,
                    "outcome": "succeeded",
                    "failure_kind": None,
                    "message": receipt.transaction_hash
                })
                transaction = await self.transaction_service.record_blockchain(
                    listing, user, request.kind, receipt, terms=request, notes=request.notes
                )

        if transaction is None:
            transaction = await self.transaction_service.record_traditional(
                listing, user, request.kind, request.bank_details, terms=request, notes=request.notes
            )
            attempts.append({
                "method": PaymentMethod.TRADITIONAL,
                "outcome": "recorded",
                "failure_kind": None,
                "message": f"Payment {transaction.payment_id} is pending confirmation"
            })

        listing = await self.transaction_service.apply_listing_effects(listing, transaction)

        logger.info(
            f"Settled {request.kind.value} of listing {listing.id} for {user.email}: "
            f"{transaction.payment_method.value} {transaction.status.value}"
            f"{' (fallback)' if fell_back else ''}"
        )

        return {
            "attempts": attempts,
            "notices": notices,
            "fell_back": fell_back,
            "transaction": transaction.to_dict(),
            "listing_status": listing.status.value,
        }
