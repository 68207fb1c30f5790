"""
Transaction API endpoints: settlement, externally settled payments and history.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, List
from uuid import UUID

from renthub.models.user import User
from renthub.models.transaction import PaymentMethod
from renthub.services.settlement import SettlementService
from renthub.services.transaction import TransactionService
from renthub.schemas.transaction import (
    SettlementRequest,
    SettlementResponse,
    TransactionCreate,
    TransactionResponse
)
from renthub.schemas.error import get_crud_error_responses, get_error_responses
from renthub.utils.dependencies import (
    get_current_user,
    get_settlement_service,
    get_transaction_service
)


router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post(
    "/settle",
    response_model=SettlementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Rent or buy a listing",
    description=(
        "Pay with the marketplace contract and fall back to a traditional payment "
        "when the blockchain attempt fails"
    ),
    responses=get_crud_error_responses()
)
async def settle(
    request_data: SettlementRequest,
    current_user: User = Depends(get_current_user),
    settlement_service: SettlementService = Depends(get_settlement_service)
) -> SettlementResponse:
    """
    Settle a rent or purchase.

    The response lists every attempt made, the notices to show the user,
    whether the traditional fallback was used and the recorded transaction.

    Raises:
        ListingNotFoundError: If the listing does not exist
        ListingStatusError: If the listing is not available
        SettlementFailedError: If the blockchain attempt failed and the
            failure kind does not allow a fallback
    """
    result = await settlement_service.settle(request_data, current_user)
    return SettlementResponse.model_validate(result)


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a payment",
    description=(
        "Record a payment settled outside the settlement flow, e.g. from the client's own wallet. "
        "The record stays pending until confirmed and each transaction hash is accepted once."
    ),
    responses=get_crud_error_responses()
)
async def create_transaction(
    transaction_data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> TransactionResponse:
    transaction = await transaction_service.record_external(transaction_data, current_user)
    return TransactionResponse.model_validate(transaction.to_dict())


@router.get(
    "/me",
    response_model=List[TransactionResponse],
    status_code=status.HTTP_200_OK,
    summary="Get my transactions",
    description="Transactions where the authenticated user is payer or payee, newest first",
    responses=get_error_responses(401, 500)
)
async def get_my_transactions(
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> List[TransactionResponse]:
    transactions = await transaction_service.get_user_transactions(current_user)
    return [TransactionResponse.model_validate(t.to_dict()) for t in transactions]


@router.get(
    "/property/{listing_id}",
    response_model=List[TransactionResponse],
    status_code=status.HTTP_200_OK,
    summary="Get listing transaction history",
    description="The owner sees every transaction of the listing, other users only their own",
    responses=get_error_responses(400, 401, 404, 500)
)
async def get_listing_transactions(
    listing_id: UUID = Path(..., description="Listing ID"),
    payment_method: Optional[PaymentMethod] = Query(None, description="Only blockchain or traditional records"),
    current_user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> List[TransactionResponse]:
    """
    Transaction history of one listing.

    Raises:
        ListingNotFoundError: If the listing does not exist
    """
    transactions = await transaction_service.get_listing_history(listing_id, current_user, payment_method)
    return [TransactionResponse.model_validate(t.to_dict()) for t in transactions]
