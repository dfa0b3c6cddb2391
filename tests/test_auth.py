"""
Auth tests - registration, login, logout and the bearer-token gate.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from jose import jwt

from solarpanels.config import get_settings
from solarpanels.core.security import create_access_token


@pytest.mark.asyncio
async def test_register_creates_regular_user(client: AsyncClient):
    response = await client.post(
        "/api/v1/users/register", json={"login": "carol", "password": "longenough"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["login"] == "carol"
    assert data["is_moderator"] is False
    assert "password" not in data and "hashed_password" not in data


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient):
    response = await client.post("/api/v1/users/register", json={"login": "carol", "password": "short"})
    assert response.status_code == 400
    assert response.json()["error"] == "bad_request"


@pytest.mark.asyncio
async def test_register_duplicate_login(client: AsyncClient, test_user):
    response = await client.post(
        "/api/v1/users/register", json={"login": test_user.login, "password": "longenough"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


@pytest.mark.asyncio
async def test_login_returns_token_usable_on_gate(client: AsyncClient, moderator, password: str):
    response = await client.post(
        "/api/v1/users/login", json={"login": moderator.login, "password": password}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["is_moderator"] is True
    assert data["expires_in"] > 0

    headers = {"Authorization": f"Bearer {data['access_token']}"}
    listed = await client.get("/api/v1/solarpanel-requests", headers=headers)
    assert listed.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await client.post(
        "/api/v1/users/login", json={"login": test_user.login, "password": "not-the-password"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"


@pytest.mark.asyncio
async def test_login_unknown_user(client: AsyncClient, password: str):
    response = await client.post("/api/v1/users/login", json={"login": "nobody", "password": password})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    response = await client.get("/api/v1/solarpanel-requests")
    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_malformed_token(client: AsyncClient):
    response = await client.get(
        "/api/v1/solarpanel-requests", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient, test_user):
    token = create_access_token(test_user.id, "user", expires_delta=timedelta(seconds=-5))
    response = await client.get(
        "/api/v1/solarpanel-requests", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_unknown_role_claim(client: AsyncClient, test_user):
    token = create_access_token(test_user.id, "admin")
    response = await client.get(
        "/api/v1/solarpanel-requests", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_token(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/v1/users/logout", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get("/api/v1/solarpanel-requests", headers=auth_headers)
    assert response.status_code == 401
    assert "revoked" in response.json()["detail"]


@pytest.mark.asyncio
async def test_user_role_cannot_moderate(client: AsyncClient, auth_headers: dict):
    """Role check happens at the gate, before the request is looked up."""
    response = await client.put(
        "/api/v1/solarpanel-requests/999/moderate", headers=auth_headers, json={"action": "completed"}
    )
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


@pytest.mark.asyncio
async def test_cart_summary_anonymous(client: AsyncClient):
    response = await client.get("/api/v1/solarpanel-requests/info")
    assert response.status_code == 200
    assert response.json() == {"request_id": 0, "panels_in_request": 0}


@pytest.mark.asyncio
async def test_cart_summary_with_revoked_token_is_anonymous(
    client: AsyncClient, auth_headers: dict, panels
):
    await client.post(f"/api/v1/panels/{panels['reference'].id}", headers=auth_headers)
    await client.post("/api/v1/users/logout", headers=auth_headers)

    response = await client.get("/api/v1/solarpanel-requests/info", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"request_id": 0, "panels_in_request": 0}


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["exp", "sub"])
async def test_signed_token_without_required_claim(client: AsyncClient, test_user, missing: str):
    settings = get_settings()
    claims = {"sub": str(test_user.id), "role": "user", "exp": datetime.now(timezone.utc) + timedelta(hours=1)}
    del claims[missing]
    token = jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)
    response = await client.get(
        "/api/v1/solarpanel-requests", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"
