"""
CarVault Backend — Auth API Tests
==================================

What we test:
    ✅ Register returns a usable token
    ✅ Duplicate email → 400, bad credentials → 401
    ✅ /me requires a token that names an existing user
"""

import uuid

import pytest

from app.security import create_access_token


async def register(client, email="dana@example.com", password="s3cret!", username="Dana"):
    return await client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_token_and_user(self, test_client):
        response = await register(test_client)

        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "dana@example.com"
        assert "hashed_password" not in body["user"]

        me = await test_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert me.status_code == 200
        assert me.json()["id"] == body["user"]["id"]

    @pytest.mark.asyncio
    async def test_token_from_register_can_create_cars(self, test_client):
        token = (await register(test_client)).json()["token"]
        response = await test_client.post(
            "/api/cars",
            data={"title": "First", "description": "car"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_duplicate_email_is_400(self, test_client):
        await register(test_client)
        response = await register(test_client, email="DANA@example.com")
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "email"

    @pytest.mark.asyncio
    async def test_short_password_is_422(self, test_client):
        response = await register(test_client, password="123")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_password_limit_counts_bytes_not_characters(self, test_client):
        # 40 characters, 80 bytes in UTF-8
        response = await register(test_client, password="é" * 40)
        assert response.status_code == 422

        response = await register(test_client, password="é" * 36)
        assert response.status_code == 201


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_with_correct_password(self, test_client):
        await register(test_client)
        response = await test_client.post(
            "/api/auth/login", json={"email": "Dana@Example.com", "password": "s3cret!"}
        )
        assert response.status_code == 200
        assert response.json()["token"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password",
        [("dana@example.com", "wrong"), ("nobody@example.com", "s3cret!")],
    )
    async def test_bad_credentials_are_401(self, test_client, email, password):
        await register(test_client)
        response = await test_client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestMe:

    @pytest.mark.asyncio
    async def test_me_without_token_is_401(self, test_client):
        response = await test_client.get("/api/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_unknown_user_is_401(self, test_client):
        token = create_access_token(uuid.uuid4())
        response = await test_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
