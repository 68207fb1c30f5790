"""
Transaction model recording rent and purchase settlements.
A transaction is the only state a settlement attempt leaves behind.
"""

from sqlalchemy import String, Text, Numeric, Date, Enum as SQLEnum, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from renthub.database import Base
from decimal import Decimal
from datetime import date
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from renthub.models.user import User


class TransactionKind(str, enum.Enum):
    RENT = "rent"
    PURCHASE = "purchase"


class PaymentMethod(str, enum.Enum):
    TRADITIONAL = "traditional"
    BLOCKCHAIN = "blockchain"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Transaction(Base):
    """
    Settlement record for a rent or purchase.
    Blockchain and traditional details live in nullable column groups.
    """

    __tablename__ = "transactions"

    listing_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    payer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Tenant or buyer"
    )

    payee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Landlord or seller"
    )

    kind: Mapped[TransactionKind] = mapped_column(
        SQLEnum(TransactionKind, values_callable=_values),
        nullable=False
    )

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod, values_callable=_values),
        nullable=False,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)

    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus, values_callable=_values),
        nullable=False,
        default=TransactionStatus.PENDING
    )

    # Blockchain details
    transaction_hash: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        unique=True,
        index=True
    )
    network: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    token_symbol: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    wallet_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Traditional details, only the last four digits of the account are kept
    payment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    account_last4: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    routing_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Rent terms
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    deposit_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=12, scale=2), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    payer: Mapped["User"] = relationship("User", foreign_keys=[payer_id], lazy="selectin")
    payee: Mapped["User"] = relationship("User", foreign_keys=[payee_id], lazy="selectin")

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, kind={self.kind}, method={self.payment_method}, status={self.status})>"

    def to_dict(self) -> dict:
        result = {
            "id": str(self.id),
            "listing_id": str(self.listing_id) if self.listing_id else None,
            "kind": self.kind.value,
            "payment_method": self.payment_method.value,
            "amount": float(self.amount),
            "status": self.status.value,
            "payer": self.payer.to_summary() if self.payer else None,
            "payee": self.payee.to_summary() if self.payee else None,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "deposit_amount": float(self.deposit_amount) if self.deposit_amount is not None else None,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "blockchain_details": None,
            "traditional_details": None,
        }

        if self.payment_method == PaymentMethod.BLOCKCHAIN:
            result["blockchain_details"] = {
                "transaction_hash": self.transaction_hash,
                "network": self.network,
                "token_symbol": self.token_symbol,
                "wallet_address": self.wallet_address,
            }
        else:
            result["traditional_details"] = {
                "payment_id": self.payment_id,
                "bank_name": self.bank_name,
                "account_last4": self.account_last4,
                "routing_number": self.routing_number,
            }

        return result


listing_created_index = Index(
    "idx_transactions_listing_created",
    Transaction.listing_id,
    Transaction.created_at.desc()
)
