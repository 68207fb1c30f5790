"""
Transaction repository for settlement records and payment history.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, desc
from renthub.repositories.base import BaseRepository
from renthub.models.transaction import Transaction, PaymentMethod
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for rent and purchase transactions."""

    def __init__(self, db: AsyncSession):
        super().__init__(Transaction, db)

    async def record(self, transaction_data: Dict[str, Any]) -> Transaction:
        """
        Persist a transaction record.

        Args:
            transaction_data: Column values of the transaction

        Returns:
            Created transaction with payer and payee loaded
        """
        transaction = await self.create(transaction_data)
        logger.info(
            f"Recorded {transaction.payment_method.value} {transaction.kind.value} transaction "
            f"{transaction.id} ({transaction.status.value})"
        )
        return await self.get_by_id(transaction.id)

    async def get_for_listing(
        self,
        listing_id: uuid.UUID,
        party_id: Optional[uuid.UUID] = None,
        payment_method: Optional[PaymentMethod] = None
    ) -> List[Transaction]:
        """
        Transaction history of one listing, newest first.

        Args:
            listing_id: UUID of the listing
            party_id: Restrict to records where this user is payer or payee
            payment_method: Restrict to one payment method

        Returns:
            Matching transactions
        """
        try:
            query = select(Transaction).where(Transaction.listing_id == listing_id)

            if party_id is not None:
                query = query.where(
                    or_(Transaction.payer_id == party_id, Transaction.payee_id == party_id)
                )
            if payment_method is not None:
                query = query.where(Transaction.payment_method == payment_method)

            query = query.order_by(desc(Transaction.created_at))

            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get transactions for listing {listing_id}: {e}")
            raise

    async def get_for_user(self, user_id: uuid.UUID) -> List[Transaction]:
        """Transactions where the user is payer or payee, newest first."""
        try:
            query = (
                select(Transaction)
                .where(or_(Transaction.payer_id == user_id, Transaction.payee_id == user_id))
                .order_by(desc(Transaction.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get transactions for user {user_id}: {e}")
            raise

    async def hash_exists(self, transaction_hash: str) -> bool:
        """Whether a blockchain transaction hash is already recorded."""
        query = select(Transaction.id).where(Transaction.transaction_hash == transaction_hash)
        result = await self.db.execute(query)
        return result.first() is not None
