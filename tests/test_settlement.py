"""
Tests for the settlement flow: blockchain first, traditional payment as fallback.
"""

import uuid
import pytest
from decimal import Decimal

from renthub.blockchain import ChainFailureKind, error_for_kind, InsufficientFundsError
from renthub.models.listing import ListingStatus
from renthub.repositories.listing import ListingRepository
from renthub.schemas.transaction import SettlementRequest
from renthub.services.settlement import SettlementService, FALLBACK_NOTICE
from renthub.utils.dependencies import get_settlement_service
from renthub.utils.exceptions import SettlementFailedError, ListingStatusError
from renthub.main import app
from conftest import ListingFactory, auth_headers, BUYER_WALLET

BANK_DETAILS = {"bank_name": "First National", "account_number": "0001-2345-6789", "routing_number": "021000021"}


def settle_payload(listing, kind="purchase", **overrides):
    payload = {"listing_id": str(listing.id), "kind": kind, "wallet_address": BUYER_WALLET}
    payload.update(overrides)
    return payload


class TestBlockchainSettlement:
    """Successful blockchain attempts."""

    async def test_purchase_success(self, client, listing, owner, tenant, fake_gateway):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["fell_back"] is False
        assert data["notices"] == []
        assert data["attempts"] == [{
            "method": "blockchain",
            "outcome": "succeeded",
            "failure_kind": None,
            "message": "0x" + "2" * 64
        }]

        transaction = data["transaction"]
        assert transaction["payment_method"] == "blockchain"
        assert transaction["status"] == "completed"
        assert transaction["amount"] == 1200.0
        assert transaction["payer"]["id"] == str(tenant.id)
        assert transaction["payee"]["id"] == str(owner.id)
        assert transaction["blockchain_details"]["transaction_hash"] == "0x" + "2" * 64
        assert transaction["blockchain_details"]["network"] == "sepolia"
        assert transaction["traditional_details"] is None

        assert fake_gateway.purchases == [(listing.id.int, Decimal("1200.00"), BUYER_WALLET)]

    async def test_completed_purchase_transfers_ownership(self, client, db_session, listing, tenant):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing),
            headers=auth_headers(tenant)
        )

        assert response.json()["listing_status"] == "pending"
        updated = await ListingRepository(db_session).get_listing_with_details(listing.id)
        assert updated.owner_id == tenant.id
        assert updated.status == ListingStatus.PENDING

    async def test_completed_rent_marks_listing_rented(self, client, db_session, listing, owner, tenant, fake_gateway):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(
                listing,
                kind="rent",
                start_date="2026-01-01",
                end_date="2026-12-31",
                deposit_amount="2400"
            ),
            headers=auth_headers(tenant)
        )

        data = response.json()
        assert data["listing_status"] == "rented"
        assert data["transaction"]["kind"] == "rent"
        assert data["transaction"]["start_date"] == "2026-01-01"
        assert data["transaction"]["deposit_amount"] == 2400.0
        assert data["transaction"]["blockchain_details"]["transaction_hash"] == "0x" + "3" * 64

        updated = await ListingRepository(db_session).get_listing_with_details(listing.id)
        assert updated.owner_id == owner.id
        assert updated.status == ListingStatus.RENTED

    async def test_blockchain_rent_is_a_plain_payment(self, client, listing, tenant, fake_gateway):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing, kind="rent"),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 201
        assert fake_gateway.purchases == []
        assert fake_gateway.payments == [(Decimal("1200.00"), BUYER_WALLET)]

    async def test_failed_rent_payment_falls_back(self, client, listing, owner, tenant, fake_gateway):
        fake_gateway.failure = error_for_kind(ChainFailureKind.UNAVAILABLE, "Blockchain rent payments are not configured")

        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing, kind="rent"),
            headers=auth_headers(tenant)
        )

        data = response.json()
        assert data["fell_back"] is True
        assert data["notices"][0] == "Blockchain rent payments are not configured"
        assert data["transaction"]["payee"]["id"] == str(owner.id)
        assert fake_gateway.purchases == []


class TestFallback:
    """Failed blockchain attempts and the traditional fallback."""

    @pytest.mark.parametrize("kind", [kind.value for kind in ChainFailureKind])
    async def test_each_failure_kind_falls_back(self, client, db_session, listing, owner, tenant, fake_gateway, kind):
        fake_gateway.failure = error_for_kind(kind)

        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["fell_back"] is True
        assert [attempt["method"] for attempt in data["attempts"]] == ["blockchain", "traditional"]
        assert data["attempts"][0]["outcome"] == "failed"
        assert data["attempts"][0]["failure_kind"] == kind
        assert data["attempts"][1]["outcome"] == "recorded"
        assert data["notices"] == [fake_gateway.failure.user_message, FALLBACK_NOTICE]

        transaction = data["transaction"]
        assert transaction["payment_method"] == "traditional"
        assert transaction["status"] == "pending"
        assert transaction["traditional_details"]["payment_id"].startswith("PAY-")
        assert data["listing_status"] == "pending"

        updated = await ListingRepository(db_session).get_listing_with_details(listing.id)
        assert updated.status == ListingStatus.PENDING
        assert updated.owner_id == owner.id

    async def test_fallback_keeps_bank_details(self, client, listing, tenant, fake_gateway):
        fake_gateway.failure = InsufficientFundsError("Insufficient funds. You need 1200 ETH but your balance is 1 ETH")

        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing, bank_details=BANK_DETAILS),
            headers=auth_headers(tenant)
        )

        data = response.json()
        assert data["notices"][0] == "Insufficient funds. You need 1200 ETH but your balance is 1 ETH"
        details = data["transaction"]["traditional_details"]
        assert details["bank_name"] == "First National"
        assert details["account_last4"] == "6789"
        assert "account_number" not in details

    async def test_excluded_kind_fails_settlement(self, client, db_session, listing, tenant, fake_gateway):
        fake_gateway.failure = error_for_kind(ChainFailureKind.USER_REJECTED)
        app.dependency_overrides[get_settlement_service] = lambda: SettlementService(
            db_session, fake_gateway, fallback_kinds=["unavailable"]
        )

        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "SETTLEMENT_FAILED"
        assert error["details"][0]["type"] == "user_rejected"

        updated = await ListingRepository(db_session).get_listing_with_details(listing.id)
        assert updated.status == ListingStatus.AVAILABLE

        history = await client.get(f"/api/transactions/property/{listing.id}", headers=auth_headers(tenant))
        assert history.json() == []


class TestTraditionalSettlement:

    async def test_traditional_requested_directly(self, client, listing, tenant, fake_gateway):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing, payment_method="traditional", wallet_address=None, bank_details=BANK_DETAILS),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["fell_back"] is False
        assert [attempt["method"] for attempt in data["attempts"]] == ["traditional"]
        assert data["transaction"]["status"] == "pending"
        assert fake_gateway.purchases == []

    async def test_traditional_requires_bank_details(self, client, listing, tenant):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing, payment_method="traditional"),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestPreChecks:

    async def test_wallet_required_for_blockchain(self, client, listing, tenant, fake_gateway):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing, wallet_address=None),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "WALLET_NOT_CONNECTED"
        assert fake_gateway.purchases == []

    async def test_owner_cannot_settle_own_listing(self, client, listing, owner):
        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(listing),
            headers=auth_headers(owner)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "OWN_LISTING"

    async def test_unknown_listing(self, client, tenant):
        response = await client.post(
            "/api/transactions/settle",
            json={"listing_id": str(uuid.uuid4()), "kind": "rent", "wallet_address": BUYER_WALLET},
            headers=auth_headers(tenant)
        )

        assert response.status_code == 404

    async def test_unavailable_listing(self, client, db_session, owner, tenant):
        rented = await ListingFactory.create_listing(db_session, owner, status=ListingStatus.RENTED)

        response = await client.post(
            "/api/transactions/settle",
            json=settle_payload(rented),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "LISTING_STATUS"

    async def test_requires_token(self, client, listing):
        response = await client.post("/api/transactions/settle", json=settle_payload(listing))

        assert response.status_code == 401


class TestSettlementService:
    """SettlementService used directly."""

    async def test_second_settlement_is_rejected(self, db_session, listing, tenant, fake_gateway):
        service = SettlementService(db_session, fake_gateway)
        request = SettlementRequest(listing_id=listing.id, kind="rent", wallet_address=BUYER_WALLET)

        result = await service.settle(request, tenant)
        assert result["listing_status"] == "rented"

        with pytest.raises(ListingStatusError):
            await service.settle(request, tenant)
        assert len(fake_gateway.payments) == 1

    async def test_fallback_kinds_default_to_settings(self, db_session, fake_gateway):
        service = SettlementService(db_session, fake_gateway)
        assert service.fallback_kinds == {kind.value for kind in ChainFailureKind}

    async def test_empty_fallback_set_never_falls_back(self, db_session, listing, tenant, fake_gateway):
        fake_gateway.failure = error_for_kind(ChainFailureKind.UNAVAILABLE)
        service = SettlementService(db_session, fake_gateway, fallback_kinds=[])
        request = SettlementRequest(listing_id=listing.id, kind="purchase", wallet_address=BUYER_WALLET)

        with pytest.raises(SettlementFailedError) as exc_info:
            await service.settle(request, tenant)

        assert exc_info.value.failure_kind == "unavailable"
