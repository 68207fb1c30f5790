"""
Pydantic schemas for settlements and transaction records.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from renthub.models.transaction import TransactionKind, PaymentMethod, TransactionStatus
from renthub.schemas.user import UserSummary


WALLET_PATTERN = r"^0x[0-9a-fA-F]{40}$"


class BankDetails(BaseModel):
    """
    Bank details for a traditional payment.
    Only the last four digits of the account number are ever stored.
    """

    bank_name: str = Field(..., min_length=1, max_length=120, examples=["First National"])
    account_number: str = Field(..., min_length=4, max_length=34, examples=["000123456789"])
    routing_number: str = Field(..., min_length=1, max_length=20, examples=["021000021"])

    @field_validator('account_number', 'routing_number')
    @classmethod
    def digits_only(cls, v):
        cleaned = v.replace(" ", "").replace("-", "")
        if not cleaned.isdigit():
            raise ValueError("Must contain digits only")
        return cleaned

    @property
    def account_last4(self) -> str:
        return self.account_number[-4:]


class RentTerms(BaseModel):
    """Optional rental period and deposit."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    deposit_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)

    @model_validator(mode='after')
    def validate_period(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class SettlementRequest(RentTerms):
    """Request to rent or buy a listing."""

    listing_id: UUID
    kind: TransactionKind = Field(..., description="rent or purchase")
    payment_method: PaymentMethod = Field(
        PaymentMethod.BLOCKCHAIN,
        description="Preferred payment method, blockchain falls back to traditional"
    )
    wallet_address: Optional[str] = Field(None, pattern=WALLET_PATTERN)
    bank_details: Optional[BankDetails] = None
    notes: Optional[str] = Field(None, max_length=1000)


class TransactionCreate(RentTerms):
    """Record of a payment settled outside the settlement flow."""

    listing_id: UUID
    kind: TransactionKind
    payment_method: PaymentMethod
    transaction_hash: Optional[str] = Field(None, pattern=r"^0x[0-9a-fA-F]{64}$")
    wallet_address: Optional[str] = Field(None, pattern=WALLET_PATTERN)
    network: Optional[str] = Field(None, max_length=50)
    token_symbol: Optional[str] = Field(None, max_length=20)
    bank_details: Optional[BankDetails] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode='after')
    def validate_method_details(self):
        """Each payment method needs its own details."""
        if self.payment_method == PaymentMethod.BLOCKCHAIN and not self.transaction_hash:
            raise ValueError("Blockchain transactions require a transaction hash")
        if self.payment_method == PaymentMethod.TRADITIONAL and self.bank_details is None:
            raise ValueError("Traditional transactions require bank details")
        return self


class BlockchainDetails(BaseModel):
    transaction_hash: Optional[str] = None
    network: Optional[str] = None
    token_symbol: Optional[str] = None
    wallet_address: Optional[str] = None


class TraditionalDetails(BaseModel):
    payment_id: Optional[str] = None
    bank_name: Optional[str] = None
    account_last4: Optional[str] = None
    routing_number: Optional[str] = None


class TransactionResponse(BaseModel):
    """Schema for transaction responses."""

    id: str
    listing_id: Optional[str] = None
    kind: TransactionKind
    payment_method: PaymentMethod
    amount: float
    status: TransactionStatus
    payer: Optional[UserSummary] = None
    payee: Optional[UserSummary] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    deposit_amount: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime
    blockchain_details: Optional[BlockchainDetails] = None
    traditional_details: Optional[TraditionalDetails] = None


class SettlementAttempt(BaseModel):
    """One payment attempt made while settling."""

    method: PaymentMethod
    outcome: str = Field(..., description="succeeded, failed or recorded")
    failure_kind: Optional[str] = None
    message: Optional[str] = None


class SettlementResponse(BaseModel):
    """Outcome of a settlement."""

    attempts: List[SettlementAttempt]
    notices: List[str]
    fell_back: bool
    transaction: TransactionResponse
    listing_status: str
