"""
Tests for recording externally settled payments and transaction history.
"""

import uuid

from renthub.models.listing import ListingStatus
from renthub.repositories.listing import ListingRepository
from conftest import ListingFactory, UserFactory, auth_headers, BUYER_WALLET

TX_HASH = "0x" + "f" * 64
BANK_DETAILS = {"bank_name": "First National", "account_number": "000123456789", "routing_number": "021000021"}


def blockchain_record(listing, **overrides):
    payload = {
        "listing_id": str(listing.id),
        "kind": "purchase",
        "payment_method": "blockchain",
        "transaction_hash": TX_HASH,
        "wallet_address": BUYER_WALLET,
        "network": "sepolia",
        "token_symbol": "ETH"
    }
    payload.update(overrides)
    return payload


class TestRecordTransaction:
    """POST /api/transactions"""

    async def test_record_blockchain_payment(self, client, db_session, listing, owner, tenant):
        response = await client.post(
            "/api/transactions",
            json=blockchain_record(listing),
            headers=auth_headers(tenant)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["blockchain_details"] == {
            "transaction_hash": TX_HASH,
            "network": "sepolia",
            "token_symbol": "ETH",
            "wallet_address": BUYER_WALLET
        }

        # A reported hash is not proof of payment, the listing keeps its owner
        updated = await ListingRepository(db_session).get_listing_with_details(listing.id)
        assert updated.owner_id == owner.id
        assert updated.status == ListingStatus.PENDING

    async def test_transaction_hash_is_accepted_once(self, client, db_session, owner, tenant):
        first = await ListingFactory.create_listing(db_session, owner, title="First")
        second = await ListingFactory.create_listing(db_session, owner, title="Second")

        accepted = await client.post(
            "/api/transactions", json=blockchain_record(first), headers=auth_headers(tenant)
        )
        reused = await client.post(
            "/api/transactions",
            json=blockchain_record(second, transaction_hash=TX_HASH.upper().replace("0X", "0x")),
            headers=auth_headers(tenant)
        )

        assert accepted.status_code == 201
        assert reused.status_code == 409
        assert reused.json()["error"]["code"] == "DUPLICATE_TRANSACTION"

        untouched = await ListingRepository(db_session).get_listing_with_details(second.id)
        assert untouched.owner_id == owner.id
        assert untouched.status == ListingStatus.AVAILABLE

    async def test_record_traditional_payment(self, client, db_session, listing, tenant):
        response = await client.post(
            "/api/transactions",
            json={
                "listing_id": str(listing.id),
                "kind": "rent",
                "payment_method": "traditional",
                "bank_details": BANK_DETAILS,
                "start_date": "2026-02-01",
                "end_date": "2026-07-31"
            },
            headers=auth_headers(tenant)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["traditional_details"]["account_last4"] == "6789"
        assert data["end_date"] == "2026-07-31"

        updated = await ListingRepository(db_session).get_listing_with_details(listing.id)
        assert updated.status == ListingStatus.PENDING

    async def test_blockchain_record_requires_hash(self, client, listing, tenant):
        response = await client.post(
            "/api/transactions",
            json={"listing_id": str(listing.id), "kind": "purchase", "payment_method": "blockchain"},
            headers=auth_headers(tenant)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_rent_period_must_not_end_before_start(self, client, listing, tenant):
        response = await client.post(
            "/api/transactions",
            json={
                "listing_id": str(listing.id),
                "kind": "rent",
                "payment_method": "traditional",
                "bank_details": BANK_DETAILS,
                "start_date": "2026-07-01",
                "end_date": "2026-06-01"
            },
            headers=auth_headers(tenant)
        )

        assert response.status_code == 400

    async def test_cannot_record_for_own_listing(self, client, listing, owner):
        response = await client.post(
            "/api/transactions",
            json={
                "listing_id": str(listing.id),
                "kind": "rent",
                "payment_method": "traditional",
                "bank_details": BANK_DETAILS
            },
            headers=auth_headers(owner)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "OWN_LISTING"


class TestTransactionHistory:
    """GET /api/transactions/property/{id} and /api/transactions/me"""

    async def _settle(self, client, listing, user, payment_method="traditional"):
        payload = {"listing_id": str(listing.id), "kind": "rent", "payment_method": payment_method}
        if payment_method == "traditional":
            payload["bank_details"] = BANK_DETAILS
        else:
            payload["wallet_address"] = BUYER_WALLET
        response = await client.post("/api/transactions/settle", json=payload, headers=auth_headers(user))
        assert response.status_code == 201
        return response.json()["transaction"]

    async def test_owner_sees_all_and_others_see_their_own(self, client, db_session, owner, tenant):
        other = await UserFactory.create_user(db_session, name="Other Buyer", email="other@example.com")
        first = await ListingFactory.create_listing(db_session, owner, title="First")

        tenant_tx = await self._settle(client, first, tenant)
        # Reopen the listing so a second user can settle it
        await ListingRepository(db_session).update(first.id, {"status": ListingStatus.AVAILABLE})
        other_tx = await self._settle(client, first, other)

        as_owner = await client.get(f"/api/transactions/property/{first.id}", headers=auth_headers(owner))
        as_tenant = await client.get(f"/api/transactions/property/{first.id}", headers=auth_headers(tenant))

        assert [t["id"] for t in as_owner.json()] == [other_tx["id"], tenant_tx["id"]]
        assert [t["id"] for t in as_tenant.json()] == [tenant_tx["id"]]

    async def test_payment_method_filter(self, client, db_session, owner, tenant):
        listing = await ListingFactory.create_listing(db_session, owner)
        await self._settle(client, listing, tenant, payment_method="blockchain")

        blockchain = await client.get(
            f"/api/transactions/property/{listing.id}",
            params={"payment_method": "blockchain"},
            headers=auth_headers(owner)
        )
        traditional = await client.get(
            f"/api/transactions/property/{listing.id}",
            params={"payment_method": "traditional"},
            headers=auth_headers(owner)
        )

        assert len(blockchain.json()) == 1
        assert traditional.json() == []

    async def test_history_of_unknown_listing(self, client, tenant):
        response = await client.get(f"/api/transactions/property/{uuid.uuid4()}", headers=auth_headers(tenant))

        assert response.status_code == 404

    async def test_my_transactions_as_payer_and_payee(self, client, listing, owner, tenant):
        transaction = await self._settle(client, listing, tenant)

        as_payer = await client.get("/api/transactions/me", headers=auth_headers(tenant))
        as_payee = await client.get("/api/transactions/me", headers=auth_headers(owner))

        assert [t["id"] for t in as_payer.json()] == [transaction["id"]]
        assert [t["id"] for t in as_payee.json()] == [transaction["id"]]
