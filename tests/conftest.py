"""
Shared test fixtures.

API tests drive the FastAPI app in-process through httpx.ASGITransport
against a throwaway SQLite file per test.
"""

import os

# Must be set before the app reads its settings
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx
import pytest

from noteflow.config import get_settings
from noteflow.database import connect_db, close_db
from noteflow.main import app

get_settings.cache_clear()


@pytest.fixture
async def db(tmp_path):
    """Connect the global database to a temporary file."""
    database = await connect_db(str(tmp_path / "test.db"))
    yield database
    await close_db()


@pytest.fixture
async def client(db):
    """HTTP client wired straight into the ASGI app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def register_user(client):
    """Factory that registers a user and returns auth headers."""
    async def _register(email: str = "alice@example.com", name: str = "Alice") -> dict:
        response = await client.post(
            "/api/auth/register",
            json={"email": email, "name": name, "password": "password123"},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _register


@pytest.fixture
async def auth_headers(register_user):
    """Auth headers for the default test user."""
    return await register_user()


@pytest.fixture
async def other_headers(register_user):
    """Auth headers for a second, unrelated user."""
    return await register_user(email="bob@example.com", name="Bob")
