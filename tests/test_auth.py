"""Tests for registration, login, and bearer authentication."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_returns_token(client: AsyncClient):
    response = await client.post(
        "/api/register",
        json={"name": "Alex Parent", "email": "Alex@Example.com ", "password": "secret123"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User created successfully"
    assert data["token"]

    profile = await client.get(
        "/api/profile", headers={"Authorization": f"Bearer {data['token']}"}
    )
    assert profile.status_code == 200
    assert profile.json()["email"] == "alex@example.com"


@pytest.mark.asyncio
async def test_register_requires_all_fields(client: AsyncClient):
    response = await client.post("/api/register", json={"name": "", "email": "a@b.com", "password": "x"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Name, email, and password are required"


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client: AsyncClient, test_user):
    response = await client.post(
        "/api/register",
        json={"name": "Someone", "email": "JANE@example.com", "password": "secret123"},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already exists"


@pytest.mark.asyncio
async def test_login_success_and_failure(client: AsyncClient, test_user):
    ok = await client.post("/api/login", json={"email": "jane@example.com", "password": "password123"})
    assert ok.status_code == 200
    assert ok.json()["token"]

    bad = await client.post("/api/login", json={"email": "jane@example.com", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid credentials"

    unknown = await client.post("/api/login", json={"email": "nobody@example.com", "password": "x"})
    assert unknown.status_code == 401


@pytest.mark.asyncio
async def test_missing_or_malformed_authorization(client: AsyncClient):
    missing = await client.get("/api/profile")
    assert missing.status_code == 401
    assert missing.json()["detail"] == "Authorization header missing"

    malformed = await client.get("/api/profile", headers={"Authorization": "Token abc"})
    assert malformed.status_code == 401
    assert malformed.json()["detail"] == "Invalid authorization header format"

    garbage = await client.get("/api/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401
    assert garbage.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_users_list_is_admin_only(authed_client: AsyncClient, user_factory):
    forbidden = await authed_client.get("/api/users")
    assert forbidden.status_code == 403

    admin = user_factory("Admin", "admin@example.com", is_admin=True)
    response = await authed_client.get("/api/users", headers=admin.headers)
    assert response.status_code == 200
    emails = {u["email"] for u in response.json()}
    assert {"jane@example.com", "admin@example.com"} <= emails
    assert all("password_hash" not in u for u in response.json())
