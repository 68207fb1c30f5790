"""
Tests for registration, login, token handling and the authentication guard.
"""

import pytest
from datetime import timedelta
from jose import jwt

from renthub.config import settings
from renthub.services.auth import AuthService
from renthub.utils.auth import create_access_token, verify_token, hash_password, verify_password
from renthub.utils.exceptions import InvalidCredentialsError, InvalidTokenError, DuplicateEmailError
from conftest import UserFactory, auth_headers, TEST_PASSWORD


class TestRegisterEndpoint:
    """POST /api/auth/register"""

    async def test_register_success(self, client):
        response = await client.post("/api/auth/register", json={
            "name": "Jane Doe",
            "email": "Jane@Example.com",
            "password": "securepassword123"
        })

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User registered successfully"
        assert data["user"]["email"] == "jane@example.com"
        assert data["user"]["name"] == "Jane Doe"
        assert "password" not in data["user"]
        assert "hashed_password" not in data["user"]

    async def test_register_twice_is_rejected(self, client):
        payload = {"name": "Jane", "email": "jane@example.com", "password": "securepassword123"}
        first = await client.post("/api/auth/register", json=payload)
        second = await client.post("/api/auth/register", json={**payload, "email": "JANE@example.com"})

        assert first.status_code == 201
        assert second.status_code == 400
        error = second.json()["error"]
        assert error["code"] == "DUPLICATE_EMAIL"
        assert error["message"] == "User with this email already exists"

    async def test_register_short_password(self, client):
        response = await client.post("/api/auth/register", json={
            "name": "Jane",
            "email": "jane@example.com",
            "password": "short"
        })

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["field"] == "password"

    async def test_register_invalid_email(self, client):
        response = await client.post("/api/auth/register", json={
            "name": "Jane",
            "email": "not-an-email",
            "password": "securepassword123"
        })

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestLoginEndpoint:
    """POST /api/auth/login"""

    async def test_login_success(self, client, owner):
        response = await client.post("/api/auth/login", json={
            "email": "OWNER@example.com",
            "password": TEST_PASSWORD
        })

        assert response.status_code == 200
        data = response.json()
        assert data["token"] == data["access_token"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600
        assert data["user"] == {"id": str(owner.id), "name": owner.name, "email": owner.email}

        payload = jwt.decode(data["token"], settings.jwt_secret_key, algorithms=["HS256"])
        assert payload["sub"] == str(owner.id)
        assert payload["email"] == owner.email
        assert payload["name"] == owner.name
        assert payload["exp"] - payload["iat"] == 3600

    async def test_wrong_password_and_unknown_email_look_the_same(self, client, owner):
        wrong_password = await client.post("/api/auth/login", json={
            "email": owner.email,
            "password": "wrongpassword"
        })
        unknown_email = await client.post("/api/auth/login", json={
            "email": "nobody@example.com",
            "password": "wrongpassword"
        })

        assert wrong_password.status_code == unknown_email.status_code == 401
        first = wrong_password.json()["error"]
        second = unknown_email.json()["error"]
        assert first["code"] == second["code"] == "INVALID_CREDENTIALS"
        assert first["message"] == second["message"] == "Invalid credentials"


class TestCurrentUser:
    """GET /api/auth/me and the bearer token guard."""

    async def test_me_returns_user(self, client, owner):
        response = await client.get("/api/auth/me", headers=auth_headers(owner))

        assert response.status_code == 200
        assert response.json()["email"] == "owner@example.com"

    async def test_missing_token(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "No token provided"

    async def test_invalid_token(self, client):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    async def test_expired_token(self, client, owner):
        token = create_access_token(owner.id, owner.email, owner.name, expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"


class TestAuthService:
    """AuthService functionality."""

    async def test_authenticate_user_success(self, db_session, owner):
        user = await AuthService(db_session).authenticate_user(owner.email, TEST_PASSWORD)
        assert user.id == owner.id

    async def test_authenticate_user_not_found(self, db_session):
        with pytest.raises(InvalidCredentialsError):
            await AuthService(db_session).authenticate_user("ghost@example.com", TEST_PASSWORD)

    async def test_register_duplicate_email(self, db_session):
        service = AuthService(db_session)
        await UserFactory.create_user(db_session, email="dup@example.com")

        with pytest.raises(DuplicateEmailError):
            await service.register("Dup", "dup@example.com", TEST_PASSWORD)

    async def test_get_current_user_for_deleted_account(self, db_session, owner):
        service = AuthService(db_session)
        token = service.create_token(owner)
        await db_session.delete(owner)
        await db_session.commit()

        with pytest.raises(InvalidTokenError):
            await service.get_current_user(token)


class TestTokenUtilities:

    def test_verify_token_round_trip(self):
        token = create_access_token("1b4e28ba-2fa1-11d2-883f-0016d3cca427", "a@example.com", "A")
        payload = verify_token(token)
        assert payload.user_id == "1b4e28ba-2fa1-11d2-883f-0016d3cca427"
        assert payload.email == "a@example.com"

    def test_hash_password_rejects_short_password(self):
        with pytest.raises(ValueError):
            hash_password("short")

    def test_verify_password_without_hash(self):
        assert verify_password("anything", None) is False

    def test_verify_password(self):
        hashed = hash_password(TEST_PASSWORD)
        assert hashed != TEST_PASSWORD
        assert verify_password(TEST_PASSWORD, hashed)
        assert not verify_password("wrongpassword", hashed)
