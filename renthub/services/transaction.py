"""
Transaction service for recording rent and purchase payments.
Owns the listing pre-checks and the listing effects of a recorded payment.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from renthub.repositories.listing import ListingRepository
from renthub.repositories.transaction import TransactionRepository
from renthub.models.listing import Listing, ListingStatus
from renthub.models.transaction import (
    Transaction,
    TransactionKind,
    PaymentMethod,
    TransactionStatus
)
from renthub.models.user import User
from renthub.schemas.transaction import BankDetails, RentTerms, TransactionCreate
from renthub.blockchain import ChainReceipt
from renthub.utils.exceptions import (
    ListingNotFoundError,
    ListingStatusError,
    BadRequestError,
    DuplicateTransactionError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class TransactionService:
    """Records transactions and applies their effect on the listing."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.transaction_repo = TransactionRepository(db_session)

    async def get_settleable_listing(self, listing_id: uuid.UUID, user: User) -> Listing:
        """
        Load a listing the user may rent or buy.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingStatusError: If the listing is not available
            BadRequestError: If the user owns the listing
        """
        listing = await self.listing_repo.get_listing_with_details(listing_id)
        if not listing:
            raise ListingNotFoundError()
        if listing.status != ListingStatus.AVAILABLE:
            raise ListingStatusError(f"This property is not available (status: {listing.status.value})")
        if listing.owner_id == user.id:
            raise BadRequestError("You cannot rent or buy your own property", error_code="OWN_LISTING")
        return listing

    def _base_record(
        self,
        listing: Listing,
        payer: User,
        kind: TransactionKind,
        terms: Optional[RentTerms],
        notes: Optional[str]
    ) -> dict:
        record = {
            "listing_id": listing.id,
            "payer_id": payer.id,
            "payee_id": listing.owner_id,
            "kind": kind,
            "amount": listing.price,
            "notes": notes,
        }
        if terms is not None and kind == TransactionKind.RENT:
            record.update(
                start_date=terms.start_date,
                end_date=terms.end_date,
                deposit_amount=terms.deposit_amount
            )
        return record

    async def record_blockchain(
        self,
        listing: Listing,
        payer: User,
        kind: TransactionKind,
        receipt: ChainReceipt,
        terms: Optional[RentTerms] = None,
        notes: Optional[str] = None,
        status: TransactionStatus = TransactionStatus.COMPLETED
    ) -> Transaction:
        """Record an on-chain payment, completed unless told otherwise."""
        record = self._base_record(listing, payer, kind, terms, notes)
        record.update(
            amount=receipt.price,
            payment_method=PaymentMethod.BLOCKCHAIN,
            status=status,
            transaction_hash=receipt.transaction_hash,
            network=receipt.network,
            token_symbol=receipt.token_symbol,
            wallet_address=receipt.wallet_address
        )
        return await self.transaction_repo.record(record)

    async def record_traditional(
        self,
        listing: Listing,
        payer: User,
        kind: TransactionKind,
        bank_details: Optional[BankDetails] = None,
        terms: Optional[RentTerms] = None,
        notes: Optional[str] = None
    ) -> Transaction:
        """Record a traditional payment awaiting confirmation."""
        record = self._base_record(listing, payer, kind, terms, notes)
        record.update(
            payment_method=PaymentMethod.TRADITIONAL,
            status=TransactionStatus.PENDING,
            payment_id=f"PAY-{uuid.uuid4().hex[:12].upper()}"
        )
        if bank_details is not None:
            record.update(
                bank_name=bank_details.bank_name,
                account_last4=bank_details.account_last4,
                routing_number=bank_details.routing_number
            )
        return await self.transaction_repo.record(record)

    async def apply_listing_effects(self, listing: Listing, transaction: Transaction) -> Listing:
        """
        Move the listing to the state implied by a recorded payment.

        A completed rent marks it rented, a completed purchase hands it to the
        buyer pending their review, and a pending payment marks it pending.
        """
        changes = {}
        if transaction.status == TransactionStatus.COMPLETED:
            if transaction.kind == TransactionKind.RENT:
                changes["status"] = ListingStatus.RENTED
            else:
                changes["owner_id"] = transaction.payer_id
                changes["status"] = ListingStatus.PENDING
        elif transaction.status == TransactionStatus.PENDING:
            changes["status"] = ListingStatus.PENDING

        if not changes:
            return listing

        await self.listing_repo.update(listing.id, changes)
        logger.info(f"Listing {listing.id} after {transaction.kind.value} settlement: {changes['status'].value}")
        return await self.listing_repo.get_listing_with_details(listing.id)

    async def record_external(self, data: TransactionCreate, user: User) -> Transaction:
        """
        Record a payment settled outside the settlement flow.

        Nothing here has been confirmed by the server, so both blockchain and
        traditional records are stored pending and ownership never moves.
        A blockchain transaction hash can only be recorded once.

        Raises:
            DuplicateTransactionError: If the transaction hash is already recorded
        """
        listing = await self.get_settleable_listing(data.listing_id, user)

        if data.payment_method == PaymentMethod.BLOCKCHAIN:
            transaction_hash = data.transaction_hash.lower()
            if await self.transaction_repo.hash_exists(transaction_hash):
                raise DuplicateTransactionError(transaction_hash)

            receipt = ChainReceipt(
                transaction_hash=transaction_hash,
                network=data.network or "unknown",
                token_symbol=data.token_symbol or "ETH",
                wallet_address=data.wallet_address,
                price=listing.price
            )
            transaction = await self.record_blockchain(
                listing, user, data.kind, receipt, terms=data, notes=data.notes,
                status=TransactionStatus.PENDING
            )
        else:
            transaction = await self.record_traditional(
                listing, user, data.kind, data.bank_details, terms=data, notes=data.notes
            )

        await self.apply_listing_effects(listing, transaction)
        return transaction

    async def get_listing_history(
        self,
        listing_id: uuid.UUID,
        user: User,
        payment_method: Optional[PaymentMethod] = None
    ) -> List[Transaction]:
        """
        Transaction history of a listing.
        The owner sees every record, anyone else only the ones they are party to.
        """
        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise ListingNotFoundError()

        party_id = None if listing.owner_id == user.id else user.id
        return await self.transaction_repo.get_for_listing(listing_id, party_id, payment_method)

    async def get_user_transactions(self, user: User) -> List[Transaction]:
        return await self.transaction_repo.get_for_user(user.id)
