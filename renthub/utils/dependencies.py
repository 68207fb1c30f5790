"""
FastAPI dependency injection utilities for authentication, services and the chain gateway.
"""

from functools import lru_cache
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from renthub.config import get_settings
from renthub.database import get_db
from renthub.models.user import User
from renthub.blockchain import ChainGateway, DisabledChainGateway
from renthub.services.auth import AuthService
from renthub.services.image import ImageStorageService
from renthub.services.listing import ListingService
from renthub.services.transaction import TransactionService
from renthub.services.settlement import SettlementService
from renthub.utils.exceptions import UnauthorizedError
import logging

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


def get_image_service() -> ImageStorageService:
    return ImageStorageService()


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    image_service: ImageStorageService = Depends(get_image_service)
) -> ListingService:
    """
    Get listing service instance.

    Args:
        db: Database session
        image_service: Image storage for uploads

    Returns:
        ListingService instance
    """
    return ListingService(db, image_service)


async def get_transaction_service(db: AsyncSession = Depends(get_db)) -> TransactionService:
    return TransactionService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the Bearer token.

    Raises:
        UnauthorizedError: If no token was sent
        InvalidTokenError: If the token is invalid or expired
    """
    if not credentials:
        raise UnauthorizedError("No token provided")

    return await auth_service.get_current_user(credentials.credentials)


@lru_cache()
def _configured_gateway() -> ChainGateway:
    settings = get_settings()
    if not settings.blockchain_enabled:
        logger.info("Blockchain settlement disabled: no provider or contract configured")
        return DisabledChainGateway(settings.chain_network, settings.chain_token_symbol)

    from renthub.blockchain.web3_gateway import Web3ContractGateway

    try:
        gateway = Web3ContractGateway.from_settings(settings)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Could not load the marketplace contract from {settings.contract_abi_path}: {e}")
        return DisabledChainGateway(settings.chain_network, settings.chain_token_symbol)

    logger.info(f"Blockchain settlement enabled on {settings.chain_network} at {settings.contract_address}")
    return gateway


def get_chain_gateway() -> ChainGateway:
    """
    Marketplace contract gateway shared by all requests.
    A disabled gateway is returned when blockchain settlement is not configured.
    """
    return _configured_gateway()


async def get_settlement_service(
    db: AsyncSession = Depends(get_db),
    gateway: ChainGateway = Depends(get_chain_gateway)
) -> SettlementService:
    return SettlementService(db, gateway)
