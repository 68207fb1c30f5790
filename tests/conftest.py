"""
Test configuration and fixtures for the RentHomeHub API.
Provides an in-memory database, a fake marketplace contract and test data factories.
"""

import io
import os
import tempfile

# Settings are read once at import time, so the environment is prepared first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="renthub-uploads-")
os.environ["WEB3_PROVIDER_URL"] = ""
os.environ["CONTRACT_ADDRESS"] = ""

import pytest
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional
from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from renthub.main import app
from renthub.database import Base, get_db
import renthub.models  # noqa: F401
from renthub.models.user import User
from renthub.models.listing import Listing, PropertyType, ListingStatus
from renthub.repositories.user import UserRepository
from renthub.repositories.listing import ListingRepository
from renthub.services.image import ImageStorageService
from renthub.blockchain import ChainError, ChainProperty, ChainReceipt
from renthub.utils.auth import create_access_token
from renthub.utils.dependencies import get_chain_gateway, get_image_service


TEST_PASSWORD = "testpassword123"
BUYER_WALLET = "0x" + "b" * 40
SELLER_WALLET = "0x" + "a" * 40


class FakeChainGateway:
    """In-memory marketplace contract; set `failure` to make every call raise it."""

    network = "sepolia"
    token_symbol = "ETH"

    def __init__(self):
        self.properties: Dict[int, ChainProperty] = {}
        self.failure: Optional[ChainError] = None
        self.purchases: List[tuple] = []
        self.payments: List[tuple] = []
        self.listed: List[int] = []

    def _check(self) -> None:
        if self.failure is not None:
            raise self.failure

    async def get_property(self, token_id: int) -> ChainProperty:
        self._check()
        return self.properties.get(token_id, ChainProperty(token_id, None, Decimal("0"), False))

    async def list_property(self, token_id: int, price: Decimal, seller: str) -> ChainReceipt:
        self._check()
        self.properties[token_id] = ChainProperty(token_id, seller, Decimal(price), True)
        self.listed.append(token_id)
        return ChainReceipt("0x" + "1" * 64, self.network, self.token_symbol, seller, Decimal(price))

    async def purchase_property(self, token_id: int, price: Decimal, buyer: str) -> ChainReceipt:
        self._check()
        self.purchases.append((token_id, price, buyer))
        return ChainReceipt("0x" + "2" * 64, self.network, self.token_symbol, buyer, Decimal(price))

    async def send_payment(self, amount: Decimal, payer: str) -> ChainReceipt:
        self._check()
        self.payments.append((amount, payer))
        return ChainReceipt("0x" + "3" * 64, self.network, self.token_symbol, payer, Decimal(amount))


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_gateway() -> FakeChainGateway:
    return FakeChainGateway()


@pytest.fixture
def image_service(tmp_path) -> ImageStorageService:
    return ImageStorageService(str(tmp_path / "uploads"))


@pytest.fixture
async def client(
    db_session: AsyncSession,
    fake_gateway: FakeChainGateway,
    image_service: ImageStorageService
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with database, gateway and storage overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_chain_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_image_service] = lambda: image_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        session: AsyncSession,
        name: str = "Test User",
        email: str = "test@example.com",
        password: str = TEST_PASSWORD
    ) -> User:
        return await UserRepository(session).create_user({
            "name": name,
            "email": email,
            "password": password
        })


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def listing_data(**overrides) -> dict:
        data = {
            "title": "Sunny 2BR Apartment",
            "description": "Bright apartment close to downtown",
            "price": Decimal("1200.00"),
            "address": "123 Main St",
            "city": "Austin",
            "state": "TX",
            "zip_code": "78701",
            "property_type": PropertyType.APARTMENT,
            "bedrooms": 2,
            "bathrooms": Decimal("1.5"),
            "amenities": ["wifi", "parking"],
            "status": ListingStatus.AVAILABLE,
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_listing(session: AsyncSession, owner: User, **overrides) -> Listing:
        data = ListingFactory.listing_data(**overrides)
        data["owner_id"] = owner.id
        return await ListingRepository(session).create_listing(data)


def form_data(**overrides) -> dict:
    """Multipart form fields for creating a listing."""
    data = {
        "title": "Cozy Loft",
        "description": "Open plan loft with city views",
        "price": "1500",
        "address": "9 Elm St",
        "city": "Denver",
        "state": "CO",
        "zip_code": "80202",
        "property_type": "loft",
        "bedrooms": "1",
        "bathrooms": "1",
        "amenities": "wifi, gym , ,laundry",
    }
    data.update(overrides)
    return data


def png_bytes(width: int = 8, height: int = 6, color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user_id=user.id, email=user.email, name=user.name)
    return {"Authorization": f"Bearer {token}"}


# Common test fixtures
@pytest.fixture
async def owner(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, name="Olivia Owner", email="owner@example.com")


@pytest.fixture
async def tenant(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, name="Tom Tenant", email="tenant@example.com")


@pytest.fixture
async def listing(db_session: AsyncSession, owner: User) -> Listing:
    return await ListingFactory.create_listing(db_session, owner)
