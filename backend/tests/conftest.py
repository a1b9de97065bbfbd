"""
Test fixtures for the referral backend tests.

Provides:
- In-memory record store for isolated testing
- Async test client with the store dependency overridden
- Helpers for registering users through the API
"""
# IMPORTANT: Set environment variables BEFORE any other imports
import os

TEST_JWT_SECRET = "test_jwt_secret"

os.environ["ENVIRONMENT"] = "development"
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["BCRYPT_ROUNDS"] = "4"  # fastest cost bcrypt accepts
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REFERRAL_BONUS"] = "10"
os.environ["LEADERBOARD_SIZE"] = "20"
os.environ.pop("PUBLIC_BASE_URL", None)

import pytest
from typing import AsyncGenerator, Optional

from httpx import AsyncClient, ASGITransport

from backend.app.main import app
from backend.app.api.deps import get_store
from backend.app.core.store import MemoryStore


@pytest.fixture
def memory_store() -> MemoryStore:
    """Fresh empty store for each test."""
    return MemoryStore()


@pytest.fixture
async def client(memory_store: MemoryStore) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing API endpoints.
    Overrides the record store dependency with the in-memory store.
    """
    async def override_get_store():
        return memory_store

    app.dependency_overrides[get_store] = override_get_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def register(client: AsyncClient):
    """Register a user through the API and return the JSON body ({token, user})."""
    async def _register(
        phone: str,
        name: str = "Test User",
        password: str = "secret123",
        ref: Optional[str] = None,
    ) -> dict:
        payload = {"phone": phone, "password": password, "name": name}
        if ref is not None:
            payload["ref"] = ref
        response = await client.post("/api/register", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _register
