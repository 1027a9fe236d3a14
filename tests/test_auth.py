"""
Tests for registration, login and token checks.
"""

import pytest


class TestRegister:
    """Test account creation."""

    async def test_register_returns_token_and_user(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"email": "carol@example.com", "name": "Carol", "password": "password123"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"]
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "carol@example.com"

    async def test_duplicate_email_rejected(self, client, auth_headers):
        response = await client.post(
            "/api/auth/register",
            json={"email": "alice@example.com", "name": "Alice 2", "password": "password123"},
        )

        assert response.status_code == 400

    async def test_weak_password_rejected(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"email": "dave@example.com", "name": "Dave", "password": "short"},
        )

        assert response.status_code in (400, 422)

    @pytest.mark.parametrize(
        "password,message",
        [
            ("nodigitpw", "Password must contain at least one number"),
            ("123456789", "Password must contain at least one letter"),
        ],
    )
    async def test_password_needs_letter_and_digit(self, client, password, message):
        response = await client.post(
            "/api/auth/register",
            json={"email": "erin@example.com", "name": "Erin", "password": password},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == message


class TestLogin:
    """Test credential checks."""

    async def test_login_with_correct_password(self, client, auth_headers):
        response = await client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "password123"},
        )

        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_login_with_wrong_password(self, client, auth_headers):
        response = await client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401

    async def test_login_unknown_user(self, client):
        response = await client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": "password123"},
        )

        assert response.status_code == 401


class TestCurrentUser:
    """Test token-protected access."""

    async def test_me(self, client, auth_headers):
        response = await client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Alice"

    async def test_missing_token(self, client):
        response = await client.get("/api/notes")

        # HTTPBearer answers 403 on older FastAPI releases
        assert response.status_code in (401, 403)

    @pytest.mark.parametrize("token", ["garbage", "a.b.c"])
    async def test_invalid_token(self, client, token):
        response = await client.get(
            "/api/notes", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401


class TestHealth:
    """Test health endpoints."""

    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200

    async def test_ready(self, client):
        response = await client.get("/api/health/ready")

        assert response.status_code == 200
