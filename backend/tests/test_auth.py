"""
Tests for session tokens and password hashing.

Tests cover:
- Token creation and decoding
- Expiry and tamper detection
- Bearer header parsing
- Auth dependency on protected endpoints
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from httpx import AsyncClient

from backend.app.core.auth import (
    bearer_token,
    create_user_jwt,
    decode_user_jwt,
    verify_session,
)
from backend.app.core.constants import JWT_ALGORITHM
from backend.app.core.exceptions import UnauthorizedError
from backend.app.core.password_utils import hash_password, verify_password
from backend.app.core.settings import get_settings


class TestUserJwt:
    """Test token creation/verification."""

    def test_round_trip(self):
        token = create_user_jwt("u_abc123")
        assert decode_user_jwt(token) == "u_abc123"
        assert verify_session(token) == "u_abc123"

    def test_payload_holds_only_subject_and_expiry(self):
        issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
        token = create_user_jwt("u_abc123", issued_at=issued)
        payload = jwt.decode(
            token, get_settings().jwt_secret, algorithms=[JWT_ALGORITHM], options={"verify_exp": False}
        )
        assert set(payload) == {"sub", "exp"}
        assert payload["exp"] == int((issued + timedelta(days=7)).timestamp())

    def test_valid_until_expiry(self):
        issued = datetime.now(timezone.utc) - timedelta(days=6, hours=23)
        assert decode_user_jwt(create_user_jwt("u_1", issued_at=issued)) == "u_1"

    def test_expired_token(self):
        issued = datetime.now(timezone.utc) - timedelta(days=7, minutes=1)
        token = create_user_jwt("u_1", issued_at=issued)
        assert decode_user_jwt(token) is None
        with pytest.raises(UnauthorizedError):
            verify_session(token)

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": "u_1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "another_secret",
            algorithm=JWT_ALGORITHM,
        )
        assert decode_user_jwt(token) is None

    def test_tampered_token(self):
        token = create_user_jwt("u_1")
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        assert decode_user_jwt(tampered) is None

    def test_token_without_expiry_rejected(self):
        token = jwt.encode({"sub": "u_1"}, get_settings().jwt_secret, algorithm=JWT_ALGORITHM)
        assert decode_user_jwt(token) is None

    def test_garbage_token(self):
        assert decode_user_jwt("not.a.token") is None

    def test_missing_token(self):
        with pytest.raises(UnauthorizedError) as exc_info:
            verify_session(None)
        assert exc_info.value.status_code == 401


class TestBearerToken:
    def test_valid_header(self):
        assert bearer_token("Bearer abc") == "abc"
        assert bearer_token("bearer abc") == "abc"

    def test_invalid_headers(self):
        assert bearer_token(None) is None
        assert bearer_token("") is None
        assert bearer_token("Token abc") is None
        assert bearer_token("Bearer") is None
        assert bearer_token("Bearer a b") is None


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("secret123", rounds=4)
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_verify_against_empty_or_malformed_hash(self):
        assert not verify_password("secret123", "")
        assert not verify_password("secret123", "not-a-bcrypt-hash")


@pytest.mark.asyncio
class TestAuthEndpoints:
    """Test authentication on protected endpoints."""

    async def test_me_without_header(self, client: AsyncClient):
        response = await client.get("/api/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    async def test_me_with_wrong_scheme(self, client: AsyncClient, register):
        body = await register("+911000000001")
        response = await client.get("/api/me", headers={"Authorization": f"Token {body['token']}"})
        assert response.status_code == 401

    async def test_me_with_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    async def test_token_from_registration_authenticates(self, client: AsyncClient, register):
        body = await register("+911000000002")
        response = await client.get("/api/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert response.status_code == 200
        assert response.json()["user"]["id"] == body["user"]["id"]

    async def test_expired_token_rejected(self, client: AsyncClient, register):
        body = await register("+911000000003")
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        token = create_user_jwt(body["user"]["id"], issued_at=issued)
        response = await client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_valid_token_for_missing_user(self, client: AsyncClient):
        token = create_user_jwt("u_doesnotexist")
        response = await client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    async def test_withdraw_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/withdraw", json={"amount": 5})
        assert response.status_code == 401

    async def test_referral_link_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/referral/link")
        assert response.status_code == 401
